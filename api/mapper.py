"""
Conversions between the stored Book entity and the API shapes.
All functions are pure and never touch the store.
"""

from typing import Optional

from api.models import BookCreateInput, BookDetailView, BookListView, BookUpdateInput
from store.models import Book

UPDATABLE_FIELDS = ("title", "isbn", "publish_date", "summary", "image", "author_id")


def _author_name(book: Book) -> Optional[str]:
    return book.author.display_name if book.author else None


def to_list_view(book: Book) -> BookListView:
    return BookListView(
        id=book.id,
        title=book.title,
        isbn=book.isbn,
        image=book.image,
        author_id=book.author_id,
        author_name=_author_name(book),
    )


def to_detail_view(book: Book) -> BookDetailView:
    return BookDetailView(
        id=book.id,
        title=book.title,
        isbn=book.isbn,
        image=book.image,
        author_id=book.author_id,
        author_name=_author_name(book),
        publish_date=book.publish_date,
        summary=book.summary,
    )


def from_create_input(data: BookCreateInput) -> Book:
    """Build an unsaved entity; the store assigns ``id`` on insert."""
    return Book(**{field: getattr(data, field) for field in UPDATABLE_FIELDS})


def apply_update_input(data: BookUpdateInput, book: Book) -> Book:
    """
    Copy every updatable attribute from ``data`` onto ``book`` in place.

    ``id`` and ``version`` are left untouched; the caller has already
    checked that the ids match.
    """
    for field in UPDATABLE_FIELDS:
        setattr(book, field, getattr(data, field))
    if book.author and book.author.id != book.author_id:
        book.author = None
    return book
