"""
Unit tests for the book request handlers.
Tests the outcome of every operation and the failure boundary.
"""

import asyncio

import pytest

from api.handlers import BookHandlers
from api.mapper import from_create_input
from api.models import BookCreateInput, BookUpdateInput
from api.outcomes import OutcomeKind
from store.errors import StorageFailure
from store.memory import InMemoryBookStore
from store.models import WriteResult
from utilities.logger import RequestLogger

ERROR_MESSAGE = "Something Went Wrong. Please Try Again Later."


def update_input(book_id, **overrides):
    data = {"id": book_id, "title": "Dune (rev)", "isbn": "123", "author_id": 1}
    data.update(overrides)
    return BookUpdateInput(**data)


class TestListBooks:
    """Test cases for list_books."""

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, handlers):
        outcome = await handlers.list_books()
        assert outcome.kind is OutcomeKind.OK
        assert outcome.value == []

    @pytest.mark.asyncio
    async def test_maps_each_book_to_list_view(self, handlers, mock_store, sample_book):
        mock_store.list.return_value = [sample_book]

        outcome = await handlers.list_books()

        assert outcome.kind is OutcomeKind.OK
        assert [view.id for view in outcome.value] == [7]
        assert outcome.value[0].author_name == "Frank Herbert"

    @pytest.mark.asyncio
    async def test_store_error_becomes_storage_failure(self, handlers, mock_store, request_logger):
        mock_store.list.side_effect = StorageFailure("connection reset by peer")

        outcome = await handlers.list_books()

        assert outcome.kind is OutcomeKind.STORAGE_FAILURE
        assert outcome.message == ERROR_MESSAGE
        assert "connection reset" not in outcome.message
        request_logger.log_error.assert_called_once()


class TestGetBook:
    """Test cases for get_book."""

    @pytest.mark.asyncio
    async def test_found(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book

        outcome = await handlers.get_book(7)

        assert outcome.kind is OutcomeKind.OK
        assert outcome.value.title == "Dune"
        assert outcome.value.summary == "Desert planet politics."
        mock_store.get.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_not_found(self, handlers, request_logger):
        outcome = await handlers.get_book(99)

        assert outcome.kind is OutcomeKind.NOT_FOUND
        request_logger.log_request.assert_called_once_with("get_book", 99)
        request_logger.log_warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_unexpected_error(self, handlers, mock_store):
        mock_store.get.side_effect = RuntimeError("boom")

        outcome = await handlers.get_book(7)

        assert outcome.kind is OutcomeKind.STORAGE_FAILURE
        assert outcome.message == ERROR_MESSAGE


class TestCreateBook:
    """Test cases for create_book."""

    @pytest.mark.asyncio
    async def test_created_with_assigned_id(self, handlers, mock_store, sample_book):
        mock_store.insert.return_value = sample_book

        outcome = await handlers.create_book(
            BookCreateInput(title="Dune", isbn="123", author_id=1)
        )

        assert outcome.kind is OutcomeKind.CREATED
        assert outcome.value.id == 7
        inserted = mock_store.insert.await_args.args[0]
        assert inserted.id is None
        assert inserted.title == "Dune"

    @pytest.mark.asyncio
    async def test_storage_failure(self, handlers, mock_store):
        mock_store.insert.side_effect = StorageFailure("Author 5 does not exist")

        outcome = await handlers.create_book(
            BookCreateInput(title="Dune", isbn="123", author_id=5)
        )

        assert outcome.kind is OutcomeKind.STORAGE_FAILURE
        assert outcome.message == ERROR_MESSAGE


class TestUpdateBook:
    """Test cases for update_book."""

    @pytest.mark.asyncio
    async def test_id_mismatch_is_invalid_before_store_access(self, handlers, mock_store):
        outcome = await handlers.update_book(7, update_input(8))

        assert outcome.kind is OutcomeKind.INVALID
        mock_store.get.assert_not_awaited()
        mock_store.update_if_unchanged.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_book(self, handlers, mock_store):
        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.NOT_FOUND
        mock_store.update_if_unchanged.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_applies_input_keeping_version(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book

        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.NO_CONTENT
        written = mock_store.update_if_unchanged.await_args.args[0]
        assert written.id == 7
        assert written.version == 1
        assert written.title == "Dune (rev)"

    @pytest.mark.asyncio
    async def test_store_reports_not_found(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book
        mock_store.update_if_unchanged.return_value = WriteResult.NOT_FOUND

        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_conflict_on_deleted_record_is_not_found(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book
        mock_store.update_if_unchanged.return_value = WriteResult.CONFLICT
        mock_store.exists.return_value = False

        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.NOT_FOUND
        mock_store.exists.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_conflict_on_existing_record_is_server_error(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book
        mock_store.update_if_unchanged.return_value = WriteResult.CONFLICT
        mock_store.exists.return_value = True

        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.CONFLICT
        assert outcome.message == ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_storage_failure(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book
        mock_store.update_if_unchanged.side_effect = StorageFailure("write failed")

        outcome = await handlers.update_book(7, update_input(7))

        assert outcome.kind is OutcomeKind.STORAGE_FAILURE


class TestDeleteBook:
    """Test cases for delete_book."""

    @pytest.mark.asyncio
    async def test_deleted(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book

        outcome = await handlers.delete_book(7)

        assert outcome.kind is OutcomeKind.NO_CONTENT
        mock_store.delete.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_missing_book(self, handlers, mock_store):
        outcome = await handlers.delete_book(7)

        assert outcome.kind is OutcomeKind.NOT_FOUND
        mock_store.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_raced_delete(self, handlers, mock_store, sample_book):
        mock_store.get.return_value = sample_book
        mock_store.delete.return_value = WriteResult.NOT_FOUND

        outcome = await handlers.delete_book(7)

        assert outcome.kind is OutcomeKind.NOT_FOUND


class TestLoggingFailures:
    """A failing logger must not change any outcome."""

    @pytest.mark.asyncio
    async def test_broken_logger_does_not_abort_request(self, mock_store, sample_book):
        class BrokenSink:
            def info(self, *args, **kwargs):
                raise OSError("disk full")

            warning = error = info

        logger = RequestLogger()
        logger.logger = BrokenSink()
        mock_store.get.return_value = sample_book
        handlers = BookHandlers(mock_store, logger, ERROR_MESSAGE)

        assert (await handlers.get_book(7)).kind is OutcomeKind.OK
        assert (await handlers.get_book(7)).value.id == 7
        mock_store.get.return_value = None
        assert (await handlers.get_book(8)).kind is OutcomeKind.NOT_FOUND


class InterleavingStore(InMemoryBookStore):
    """Yields to the event loop after every read so concurrent requests overlap."""

    async def get(self, book_id):
        book = await super().get(book_id)
        await asyncio.sleep(0)
        return book


class TestConcurrentUpdates:
    """Lost-update detection through the handlers."""

    @pytest.mark.asyncio
    async def test_exactly_one_concurrent_update_succeeds(self, sample_author, request_logger):
        store = InterleavingStore(authors=[sample_author])
        created = await store.insert(
            from_create_input(BookCreateInput(title="Dune", isbn="123", author_id=1))
        )
        handlers = BookHandlers(store, request_logger, ERROR_MESSAGE)

        first, second = await asyncio.gather(
            handlers.update_book(created.id, update_input(created.id, title="First")),
            handlers.update_book(created.id, update_input(created.id, title="Second")),
        )

        kinds = sorted([first.kind, second.kind])
        assert kinds == sorted([OutcomeKind.NO_CONTENT, OutcomeKind.CONFLICT])
        stored = await store.get(created.id)
        assert stored.title == "First"
        assert stored.version == 2



@pytest.mark.parametrize("operation", [
    "list_books", "get_book", "create_book", "update_book", "delete_book",
])
def test_operations_document_their_outcomes(operation):
    doc = getattr(BookHandlers, operation).__doc__

    assert doc is not None
    assert "Returns:" in doc
