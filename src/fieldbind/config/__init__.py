"""Configuration: settings sections, file discovery, and logging setup."""

from fieldbind.config.models import ApplyConfig, ConvertConfig, PluginsConfig
from fieldbind.config.settings import FieldBindSettings

__all__ = ["ApplyConfig", "ConvertConfig", "FieldBindSettings", "PluginsConfig"]
