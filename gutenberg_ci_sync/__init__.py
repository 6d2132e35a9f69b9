"""Keep the Gutenberg mobile CI in sync with upstream pull requests."""

__version__ = "0.1.0"
