"""RiseUp news search and translation service."""

__version__ = "0.1.0"
