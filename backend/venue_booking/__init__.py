"""Municipal venue catalog, availability calendar and booking requests."""

__version__ = "1.0.0"
