"""
Pikecape Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the data-access and startup paths.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) turn them into
       JSON responses with the right HTTP status code.
Who:   Raised by the repository and database layers; caught by global handlers.

Exception Hierarchy:
    PikecapeError (base)
    ├── DataAccessError              → status carried on the instance (always 500 today)
    └── DatabaseInitializationError  → startup failure, never reaches a request

The HTTP status travels as a typed attribute on DataAccessError, so handlers
read `exc.status` and `exc.message` directly instead of decoding the message.
"""

from typing import Any, Dict, Optional


class PikecapeError(Exception):
    """
    Base exception for all Pikecape application errors.

    Attributes:
        message:  Human-readable error description (returned in API responses)
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


class DataAccessError(PikecapeError):
    """
    Raised when a repository operation against the document store fails.

    What:    The single error kind surfaced by DuckRepository.
    When:    Connection lost, server error, unacknowledged write, malformed id,
             or an operation invoked before the database was initialized.
    HTTP:    `status` (500 for every failure the repository raises)

    The message embeds the underlying store error text, e.g.
    "Failed to fetch entities; connection refused".
    """

    def __init__(
        self,
        message: str = "Internal server error",
        status: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status = status


class DatabaseInitializationError(PikecapeError):
    """
    Raised when the startup connection to MongoDB cannot be established.

    What:    The lifespan could not reach the store (bad URL, server down).
    When:    Once, during application startup. No retry is attempted.
    """

    def __init__(
        self,
        message: str = "Database initialization failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
