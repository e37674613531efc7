"""
Entity models for the book store.
Defines the persisted Book shape, its related Author and the store contract.
"""

from datetime import date
from enum import Enum
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field


class WriteResult(str, Enum):
    """Outcome of a conditional write against the store."""
    SUCCESS = "success"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


class Author(BaseModel):
    """Author record related to a book. Owned and resolved by the store."""
    id: int = Field(..., description="Author identifier")
    first_name: str = Field(..., description="Author first name")
    last_name: str = Field(..., description="Author last name")

    @property
    def display_name(self) -> str:
        """Name shown on book views."""
        return f"{self.first_name} {self.last_name}".strip()


class Book(BaseModel):
    """
    Canonical persisted book record.

    ``id`` is assigned by the store on insert and ``version`` is the
    concurrency token compared by ``update_if_unchanged``.
    """
    id: Optional[int] = Field(None, description="Store-assigned identifier")
    title: str = Field(..., description="Book title")
    isbn: str = Field(..., description="ISBN")
    publish_date: Optional[date] = Field(None, description="Publication date")
    summary: Optional[str] = Field(None, description="Short summary")
    image: Optional[str] = Field(None, description="Cover image location")
    author_id: int = Field(..., description="Related author identifier")
    version: int = Field(0, description="Concurrency token")
    author: Optional[Author] = Field(None, description="Resolved author record")

    model_config = {
        "validate_assignment": True,
    }


class BookStore(Protocol):
    """Operations every book store backend provides."""

    async def list(self) -> List[Book]:
        ...

    async def get(self, book_id: int) -> Optional[Book]:
        ...

    async def exists(self, book_id: int) -> bool:
        ...

    async def insert(self, book: Book) -> Book:
        ...

    async def update_if_unchanged(self, book: Book) -> WriteResult:
        ...

    async def delete(self, book_id: int) -> WriteResult:
        ...
