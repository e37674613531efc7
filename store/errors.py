"""
Exceptions raised by the entity store.
"""


class StorageFailure(RuntimeError):
    """Raised when a persistence operation fails.

    Wraps lower-level driver errors and constraint violations (such as an
    unknown author reference) so callers depend on a single exception type.
    """
