"""
ImageVault Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the few failure paths the API has.
Why:   Services raise; global handlers registered in main.py turn each type
       into a JSON response. Route handlers stay free of try/except.
How:   Each exception class carries a message and optional context dict.
       The message is returned to the client; the context is only logged.

Exception Hierarchy:
    ImageVaultError (base)
    ├── NotFoundError            → 404 Not Found
    ├── InvalidIdentifierError   → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Status mapping is deliberately flat: apart from the explicit not-found check,
every failure (client-caused or store-caused) is a 500 whose body carries the
raised error's message text. A malformed record id is a 500, not a 404.
"""

from typing import Any, Dict, Optional


class ImageVaultError(Exception):
    """
    Base exception for all ImageVault application errors.

    Attributes:
        message:  Error description, returned in the API response
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(ImageVaultError):
    """
    Raised when a well-formed id matches no record.

    HTTP: 404 Not Found, always with the fixed message "Image not found".
    """

    def __init__(
        self,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message="Image not found", context=ctx)


class InvalidIdentifierError(ImageVaultError):
    """
    Raised when a path id cannot be parsed as an ObjectId.

    HTTP: 500 Internal Server Error, with the parser's message.
    Not folded into NotFoundError: clients have always seen a 500 here.
    """

    def __init__(
        self,
        message: str = "Invalid record identifier",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(ImageVaultError):
    """
    Raised when the upload cannot be written to disk, or is missing entirely.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ImageVaultError):
    """
    Raised when a document store operation fails.

    What:    Insert, find or update raised (server unreachable, timeout, etc.).
    HTTP:    500 Internal Server Error, carrying the driver's message text.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
