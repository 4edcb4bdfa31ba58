"""Drop-in editor extensions, discovered by extension_manager."""
