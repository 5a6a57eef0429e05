"""Output layer — Rich and JSON renderings for debugging bindings."""
