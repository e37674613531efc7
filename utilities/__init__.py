"""
Shared utilities for the BookStore API.
"""
