"""News search client and caching proxy for NewsAPI-style providers."""

__version__ = "0.1.0"
