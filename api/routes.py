"""
Book resource routes.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Request, Response, status

from api.handlers import BookHandlers
from api.models import MAX_ID, MIN_ID, BookCreateInput, BookDetailView, BookListView, BookUpdateInput
from api.outcomes import OutcomeKind, to_response

router = APIRouter(prefix="/books", tags=["Books"])

BookId = Annotated[int, Path(ge=MIN_ID, le=MAX_ID, description="Book identifier")]


def get_handlers(request: Request) -> BookHandlers:
    """Handlers built once in the app lifespan."""
    return request.app.state.handlers


@router.get("", response_model=List[BookListView])
async def list_books(handlers: BookHandlers = Depends(get_handlers)) -> Response:
    """Get every book."""
    return to_response(await handlers.list_books())


@router.get("/{book_id}", response_model=BookDetailView)
async def get_book(book_id: BookId, handlers: BookHandlers = Depends(get_handlers)) -> Response:
    """
    Get a single book by ID.

    - **book_id**: Book identifier
    """
    return to_response(await handlers.get_book(book_id))


@router.post("", response_model=BookDetailView, status_code=status.HTTP_201_CREATED)
async def create_book(
    data: BookCreateInput,
    request: Request,
    handlers: BookHandlers = Depends(get_handlers)
) -> Response:
    """Create a book; the response carries its Location."""
    outcome = await handlers.create_book(data)
    location = None
    if outcome.kind is OutcomeKind.CREATED:
        location = str(request.url_for("get_book", book_id=outcome.value.id))
    return to_response(outcome, location=location)


@router.put("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_book(
    book_id: BookId,
    data: BookUpdateInput,
    handlers: BookHandlers = Depends(get_handlers)
) -> Response:
    """
    Replace a book.

    - **book_id**: Book identifier, must equal the body ``id``
    """
    return to_response(await handlers.update_book(book_id, data))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(book_id: BookId, handlers: BookHandlers = Depends(get_handlers)) -> Response:
    """Delete a book."""
    return to_response(await handlers.delete_book(book_id))
