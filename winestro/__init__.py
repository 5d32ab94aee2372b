"""Client for the Winestro wine shop XML API: products and customer groups."""

__version__ = "0.1.0"

__all__ = ["client", "customer", "product", "timestamps"]