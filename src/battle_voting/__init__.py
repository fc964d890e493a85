"""Battle voting resolution engine."""

__version__ = "0.1.0"
