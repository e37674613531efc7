"""
API models and schemas for the FastAPI application.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Ids BSON can encode (int64).
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


class APIModel(BaseModel):
    """Base for external shapes: camelCase on the wire, snake_case accepted on input."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class BookListView(APIModel):
    """Book projection used in list responses."""
    id: int = Field(..., description="Book identifier")
    title: str = Field(..., description="Book title")
    isbn: str = Field(..., description="ISBN")
    image: Optional[str] = Field(None, description="Cover image location")
    author_id: int = Field(..., description="Author identifier")
    author_name: Optional[str] = Field(None, description="Author display name")


class BookDetailView(BookListView):
    """Book projection used for single-book responses."""
    publish_date: Optional[date] = Field(None, description="Publication date")
    summary: Optional[str] = Field(None, description="Short summary")


class BookCreateInput(APIModel):
    """Request body for creating a book."""
    title: str = Field(..., min_length=1, max_length=50, description="Book title")
    isbn: str = Field(..., min_length=1, max_length=50, description="ISBN")
    publish_date: Optional[date] = Field(None, description="Publication date")
    summary: Optional[str] = Field(None, max_length=250, description="Short summary")
    image: Optional[str] = Field(None, description="Cover image location")
    author_id: int = Field(..., gt=0, le=MAX_ID, description="Author identifier")


class BookUpdateInput(BookCreateInput):
    """Request body for replacing a book; ``id`` must match the path id."""
    id: int = Field(..., ge=MIN_ID, le=MAX_ID, description="Book identifier")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Store connection status")
