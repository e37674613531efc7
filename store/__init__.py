"""
Entity store package for Book records.

This package contains:
- Book and Author entity models
- Tri-state write results for optimistic concurrency
- MongoDB-backed store (motor)
- In-memory store for local runs and tests
"""

from .errors import StorageFailure
from .memory import InMemoryBookStore
from .models import Author, Book, BookStore, WriteResult

__all__ = [
    "Author",
    "Book",
    "BookStore",
    "InMemoryBookStore",
    "StorageFailure",
    "WriteResult",
]
