"""In-memory storage for DocVault."""

from docvault.storage.locks import ReadWriteLock
from docvault.storage.store import DocumentStore

__all__ = ["DocumentStore", "ReadWriteLock"]
