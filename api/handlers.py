"""
Request handlers for the Book resource.

Each operation is a single linear pass over the store and returns an
``Outcome``. Handlers are failure boundaries: any unexpected error is logged
and turned into a storage failure carrying only the generic message.
"""

from api import mapper
from api.models import BookCreateInput, BookUpdateInput
from api.outcomes import Outcome
from store.models import BookStore, WriteResult
from utilities.logger import RequestLogger


class BookHandlers:
    """List, Get, Create, Update and Delete for books."""

    def __init__(self, store: BookStore, logger: RequestLogger, error_message: str):
        self.store = store
        self.logger = logger
        self.error_message = error_message

    def _failure(self, operation: str, error: Exception, book_id=None) -> Outcome:
        self.logger.log_error(
            f"Error performing {operation}", operation, book_id=book_id, error=error
        )
        return Outcome.storage_failure(self.error_message)

    def _not_found(self, operation: str, book_id: int) -> Outcome:
        self.logger.log_warning("Book record not found", operation, book_id=book_id)
        return Outcome.not_found()

    async def list_books(self) -> Outcome:
        """
        List every book with its author name.

        Returns:
            OK with list views ordered by id, or a storage failure
        """
        operation = "list_books"
        self.logger.log_request(operation)
        try:
            books = await self.store.list()
            return Outcome.ok([mapper.to_list_view(book) for book in books])
        except Exception as e:
            return self._failure(operation, e)

    async def get_book(self, book_id: int) -> Outcome:
        """
        Fetch one book.

        Args:
            book_id: Book identifier

        Returns:
            OK with the detail view, or not found
        """
        operation = "get_book"
        self.logger.log_request(operation, book_id)
        try:
            book = await self.store.get(book_id)
            if book is None:
                return self._not_found(operation, book_id)
            return Outcome.ok(mapper.to_detail_view(book))
        except Exception as e:
            return self._failure(operation, e, book_id)

    async def create_book(self, data: BookCreateInput) -> Outcome:
        """
        Store a new book; the store assigns its id.

        Args:
            data: Validated request body

        Returns:
            Created with the detail view of the stored record
        """
        operation = "create_book"
        self.logger.log_request(operation)
        try:
            book = await self.store.insert(mapper.from_create_input(data))
            return Outcome.created(mapper.to_detail_view(book))
        except Exception as e:
            return self._failure(operation, e)

    async def update_book(self, book_id: int, data: BookUpdateInput) -> Outcome:
        """
        Replace the editable fields of a book.

        The write only lands if nobody changed the record since it was read.

        Args:
            book_id: Path identifier
            data: Request body whose ``id`` must equal ``book_id``

        Returns:
            No content on success; invalid, not found or conflict otherwise
        """
        operation = "update_book"
        self.logger.log_request(operation, book_id)
        if data.id != book_id:
            self.logger.log_warning("Update id does not match path id", operation, book_id=book_id)
            return Outcome.invalid()

        try:
            book = await self.store.get(book_id)
            if book is None:
                return self._not_found(operation, book_id)

            mapper.apply_update_input(data, book)
            result = await self.store.update_if_unchanged(book)
            if result is WriteResult.SUCCESS:
                return Outcome.no_content()
            if result is WriteResult.NOT_FOUND:
                return self._not_found(operation, book_id)

            # Conflict: the record may have been deleted rather than modified.
            if not await self.store.exists(book_id):
                return self._not_found(operation, book_id)
            self.logger.log_error("Concurrent update conflict", operation, book_id=book_id)
            return Outcome.conflict(self.error_message)
        except Exception as e:
            return self._failure(operation, e, book_id)

    async def delete_book(self, book_id: int) -> Outcome:
        """
        Remove a book.

        Args:
            book_id: Book identifier

        Returns:
            No content, or not found when there was nothing to delete
        """
        operation = "delete_book"
        self.logger.log_request(operation, book_id)
        try:
            book = await self.store.get(book_id)
            if book is None:
                return self._not_found(operation, book_id)

            result = await self.store.delete(book_id)
            if result is WriteResult.NOT_FOUND:
                return self._not_found(operation, book_id)
            return Outcome.no_content()
        except Exception as e:
            return self._failure(operation, e, book_id)
