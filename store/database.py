"""
MongoDB book store for async operations.
Handles connection, indexing, id allocation and versioned writes for book data.
"""

from typing import Any, Dict, List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from bson.errors import BSONError
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError

from .errors import StorageFailure
from .models import Author, Book, WriteResult

logger = structlog.get_logger(__name__)

BOOKS_SEQUENCE = "books"

# Ids beyond int64 fail inside BSON encoding, before the driver sees them.
DRIVER_ERRORS = (PyMongoError, BSONError, OverflowError)


class MongoBookStore:
    """
    Async MongoDB store for Book records.

    Books use integer ``_id`` values drawn from a counters collection, and
    every document carries a ``version`` field that guards full-record
    replacement against lost updates.
    """

    def __init__(
        self,
        connection_url: str,
        database_name: str,
        books_collection: str = "books",
        authors_collection: str = "authors",
        counters_collection: str = "counters",
    ):
        """
        Initialize the store.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            books_collection: Collection holding book documents
            authors_collection: Collection holding author documents
            counters_collection: Collection holding id sequences
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.books_collection = books_collection
        self.authors_collection = authors_collection
        self.counters_collection = counters_collection
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.books: Optional[AsyncIOMotorCollection] = None
        self.authors: Optional[AsyncIOMotorCollection] = None
        self.counters: Optional[AsyncIOMotorCollection] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url)
            self.database = self.client[self.database_name]
            self.books = self.database[self.books_collection]
            self.authors = self.database[self.authors_collection]
            self.counters = self.database[self.counters_collection]

            await self.client.admin.command("ping")
            logger.info("Successfully connected to MongoDB",
                        database=self.database_name,
                        collection=self.books_collection)

            await self._create_indexes()

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self) -> None:
        """Create indexes for the lookups the API performs."""
        try:
            await self.books.create_index("isbn")
            await self.books.create_index("author_id")
            logger.info("Successfully created MongoDB indexes")
        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.books.count_documents({})
            return {"status": "healthy", "books_count": books_count}
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}

    @staticmethod
    def _to_document(book: Book) -> Dict[str, Any]:
        # Dates are stored as ISO strings; BSON has no date-only type.
        return book.model_dump(mode="json", exclude={"id", "author", "version"})

    @staticmethod
    def _from_document(doc: Dict[str, Any], author_doc: Optional[Dict[str, Any]] = None) -> Book:
        data = dict(doc)
        book_id = data.pop("_id")
        author_doc = data.pop("author", None) or author_doc
        author = None
        if author_doc:
            author = Author(
                id=author_doc["_id"],
                first_name=author_doc.get("first_name", ""),
                last_name=author_doc.get("last_name", ""),
            )
        return Book(id=book_id, author=author, **data)

    async def _require_author(self, author_id: int) -> Dict[str, Any]:
        author_doc = await self.authors.find_one({"_id": author_id})
        if author_doc is None:
            logger.error("Unknown author reference", author_id=author_id)
            raise StorageFailure(f"Author {author_id} does not exist")
        return author_doc

    async def _next_id(self) -> int:
        counter = await self.counters.find_one_and_update(
            {"_id": BOOKS_SEQUENCE},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    async def list(self) -> List[Book]:
        """
        Retrieve every book with its author resolved.

        Returns:
            Books ordered by id
        """
        pipeline = [
            {"$sort": {"_id": 1}},
            {"$lookup": {
                "from": self.authors_collection,
                "localField": "author_id",
                "foreignField": "_id",
                "as": "author",
            }},
            {"$unwind": {"path": "$author", "preserveNullAndEmptyArrays": True}},
        ]
        try:
            cursor = self.books.aggregate(pipeline)
            docs = await cursor.to_list(length=None)
            logger.debug("Retrieved books", count=len(docs))
            return [self._from_document(doc) for doc in docs]
        except DRIVER_ERRORS as e:
            logger.error("Failed to list books", error=str(e))
            raise StorageFailure("Failed to list books") from e

    async def get(self, book_id: int) -> Optional[Book]:
        """
        Retrieve a book by id.

        Args:
            book_id: Book identifier

        Returns:
            Book with its author resolved, or None if not found
        """
        try:
            doc = await self.books.find_one({"_id": book_id})
            if doc is None:
                return None
            author_doc = await self.authors.find_one({"_id": doc.get("author_id")})
            return self._from_document(doc, author_doc)
        except DRIVER_ERRORS as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise StorageFailure("Failed to get book") from e

    async def exists(self, book_id: int) -> bool:
        try:
            return await self.books.count_documents({"_id": book_id}, limit=1) > 0
        except DRIVER_ERRORS as e:
            logger.error("Failed to check book existence", book_id=book_id, error=str(e))
            raise StorageFailure("Failed to check book existence") from e

    async def insert(self, book: Book) -> Book:
        """
        Insert a new book and assign its id.

        Args:
            book: Book without an id

        Returns:
            The stored book with id, version and author set

        Raises:
            StorageFailure: If the author does not exist or the write fails
        """
        try:
            author_doc = await self._require_author(book.author_id)
            book_id = await self._next_id()
            doc = {"_id": book_id, **self._to_document(book), "version": 1}
            await self.books.insert_one(doc)
            logger.debug("Successfully inserted book", book_id=book_id, title=book.title)
            return self._from_document(doc, author_doc)
        except DuplicateKeyError as e:
            logger.error("Book id already allocated", error=str(e))
            raise StorageFailure("Failed to insert book") from e
        except DRIVER_ERRORS as e:
            logger.error("Failed to insert book", title=book.title, error=str(e))
            raise StorageFailure("Failed to insert book") from e

    async def update_if_unchanged(self, book: Book) -> WriteResult:
        """
        Replace a book only if its version still matches the stored one.

        Args:
            book: Book carrying the version the caller last observed

        Returns:
            SUCCESS when replaced, NOT_FOUND when the id no longer exists,
            CONFLICT when another writer got there first
        """
        try:
            await self._require_author(book.author_id)
            replacement = {**self._to_document(book), "version": book.version + 1}
            result = await self.books.replace_one(
                {"_id": book.id, "version": book.version},
                replacement,
            )
            if result.matched_count > 0:
                logger.debug("Successfully updated book", book_id=book.id, version=book.version + 1)
                return WriteResult.SUCCESS

            if not await self.exists(book.id):
                logger.warning("Book not found for update", book_id=book.id)
                return WriteResult.NOT_FOUND

            logger.warning("Stale write rejected", book_id=book.id, expected_version=book.version)
            return WriteResult.CONFLICT
        except DRIVER_ERRORS as e:
            logger.error("Failed to update book", book_id=book.id, error=str(e))
            raise StorageFailure("Failed to update book") from e

    async def delete(self, book_id: int) -> WriteResult:
        """
        Delete a book by id.

        Returns:
            SUCCESS if a document was removed, NOT_FOUND otherwise
        """
        try:
            result = await self.books.delete_one({"_id": book_id})
            if result.deleted_count > 0:
                logger.debug("Successfully deleted book", book_id=book_id)
                return WriteResult.SUCCESS
            logger.warning("Book not found for deletion", book_id=book_id)
            return WriteResult.NOT_FOUND
        except DRIVER_ERRORS as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise StorageFailure("Failed to delete book") from e
