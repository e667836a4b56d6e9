"""
Custom exceptions for laterread.

Exception Hierarchy:
    LaterReadError (base)
    ├── StoreError (collection document errors)
    │   └── StoreWriteError (document could not be persisted)
    ├── ItemNotFoundError (no item with the given url)
    └── CaptureUnavailableError (no page could be captured)

Classifier failures live in ``laterread.core.classify.models`` because they
carry a failure kind that callers switch on.
"""


class LaterReadError(Exception):
    """
    Base exception for all laterread errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class StoreError(LaterReadError):
    """Base exception for collection document errors."""


class StoreWriteError(StoreError):
    """
    Raised when a collection document cannot be written.

    The write is recoverable: the in-memory item is simply not persisted yet
    and the caller may retry.

    Example:
        >>> try:
        ...     path.write_text(content)
        ... except OSError as e:
        ...     raise StoreWriteError(
        ...         f"Failed to write {path}", path=str(path)
        ...     ) from e
    """

    def __init__(self, message: str, path: str, **context: object) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class ItemNotFoundError(LaterReadError):
    """No item with the given url exists in the collection."""

    def __init__(self, url: str, collection: str) -> None:
        super().__init__(f"'{url}' not found in {collection}", url=url, collection=collection)
        self.url = url
        self.collection = collection


class CaptureUnavailableError(LaterReadError):
    """The capture collaborator could not provide a page."""


__all__ = [
    "LaterReadError",
    "StoreError",
    "StoreWriteError",
    "ItemNotFoundError",
    "CaptureUnavailableError",
]
