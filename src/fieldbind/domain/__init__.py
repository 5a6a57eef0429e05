"""Domain layer — field descriptors, type tags, conversion and domain types.

This layer depends only on stdlib and pydantic.
It must never import from binding, config, plugins, or output.
"""
