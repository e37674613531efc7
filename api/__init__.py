"""
FastAPI REST API for the BookStore Book resource.

This package provides:
- Book list, read, create, update and delete endpoints
- Explicit mapping between stored books and API shapes
- Outcome to HTTP status translation
"""
