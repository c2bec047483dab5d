"""DocVault - in-memory document extraction, search and conversion."""

__version__ = "0.1.0"
