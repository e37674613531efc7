"""
In-memory book store.
Keeps records in dictionaries guarded by an asyncio lock; used for local runs and tests.
"""

import asyncio
from typing import Dict, List, Optional

import structlog

from .errors import StorageFailure
from .models import Author, Book, WriteResult

logger = structlog.get_logger(__name__)


class InMemoryBookStore:
    """
    Dictionary-backed store with the same semantics as the MongoDB store.
    Records are copied on the way in and out so callers never share state.
    """

    def __init__(self, authors: Optional[List[Author]] = None):
        self._books: Dict[int, Book] = {}
        self._authors: Dict[int, Author] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        for author in authors or []:
            self.add_author(author)

    def add_author(self, author: Author) -> None:
        """Register an author that books may reference."""
        self._authors[author.id] = author.model_copy()

    def _resolve(self, book: Book) -> Book:
        resolved = book.model_copy(deep=True)
        resolved.author = self._authors.get(book.author_id)
        return resolved

    def _check_author(self, author_id: int) -> None:
        if author_id not in self._authors:
            logger.error("Unknown author reference", author_id=author_id)
            raise StorageFailure(f"Author {author_id} does not exist")

    async def list(self) -> List[Book]:
        """Every book ordered by id, authors resolved."""
        async with self._lock:
            return [self._resolve(self._books[book_id]) for book_id in sorted(self._books)]

    async def get(self, book_id: int) -> Optional[Book]:
        async with self._lock:
            book = self._books.get(book_id)
            return self._resolve(book) if book else None

    async def exists(self, book_id: int) -> bool:
        async with self._lock:
            return book_id in self._books

    async def insert(self, book: Book) -> Book:
        """
        Store a new book under the next id at version 1.

        Raises:
            StorageFailure: the author does not exist
        """
        async with self._lock:
            self._check_author(book.author_id)
            stored = book.model_copy(update={"id": self._next_id, "version": 1, "author": None})
            self._books[stored.id] = stored
            self._next_id += 1
            logger.debug("Inserted book", book_id=stored.id)
            return self._resolve(stored)

    async def update_if_unchanged(self, book: Book) -> WriteResult:
        """Replace the record only if its version still equals ``book.version``."""
        async with self._lock:
            current = self._books.get(book.id)
            if current is None:
                return WriteResult.NOT_FOUND
            if current.version != book.version:
                logger.warning(
                    "Stale write rejected",
                    book_id=book.id,
                    expected_version=book.version,
                    current_version=current.version,
                )
                return WriteResult.CONFLICT
            self._check_author(book.author_id)
            self._books[book.id] = book.model_copy(
                update={"version": current.version + 1, "author": None}
            )
            return WriteResult.SUCCESS

    async def delete(self, book_id: int) -> WriteResult:
        async with self._lock:
            if self._books.pop(book_id, None) is None:
                return WriteResult.NOT_FOUND
            return WriteResult.SUCCESS
