"""Pretty-printer for JSON log streams."""

__version__ = "0.1.0"
