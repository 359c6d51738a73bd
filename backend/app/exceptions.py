"""
SnippetHub Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the different failure modes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) translate them into
       structured JSON error responses with the matching HTTP status.
Who:   Raised by services; caught by global handlers or by the import fold.

Exception Hierarchy:
    SnippetHubError (base)
    ├── ValidationError           → 400 Bad Request
    │   └── ImportValidationError → 400 Bad Request (carries the report)
    ├── NotFoundError             → 404 Not Found
    ├── ConflictError             → 409 Conflict
    │   └── DuplicateSnippetError → per-record "skipped" in the import ledger
    ├── RecordImportError         → per-record "error" in the import ledger
    ├── ImportTransactionError    → 500 (whole import rolled back)
    └── DatabaseError             → 500 Internal Server Error

DuplicateSnippetError and RecordImportError never reach the HTTP layer: the
import fold turns them into ledger entries.
"""

from typing import Any, Dict, List, Optional


class SnippetHubError(Exception):
    """
    Base exception for all SnippetHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; returned as `details` only by the
                  handlers that opt into it
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnippetHubError):
    """
    Raised when client input fails a business-rule check.

    HTTP: 400. Schema-level failures are Pydantic's and come back as 422.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ImportValidationError(ValidationError):
    """
    Raised when an import document fails structural validation.

    The validation report's errors and warnings travel in the context so the
    client can show every problem at once.
    """

    def __init__(
        self,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        message: str = "Import validation failed",
    ):
        super().__init__(
            message=message,
            context={"errors": list(errors), "warnings": list(warnings or [])},
        )
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class NotFoundError(SnippetHubError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404. Services convert SQLAlchemy's `None` into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(SnippetHubError):
    """
    Raised when a request collides with the current state of the store.

    When: deleting a tag that is still linked, creating a tag whose name is
    taken, favoriting an already-favorited snippet.
    HTTP: 409, with the context returned as `details`.
    """

    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateSnippetError(ConflictError):
    """An imported record matches an existing snippet's (title, content)."""

    def __init__(self, snippet_id: int, title: Optional[str] = None):
        super().__init__(
            message="Snippet already exists (skipped)",
            context={"snippet_id": snippet_id, "title": title},
        )
        self.snippet_id = snippet_id


class RecordImportError(SnippetHubError):
    """A single import record could not be applied (e.g. missing fields)."""


class ImportTransactionError(SnippetHubError):
    """
    Raised when the import transaction bracket itself fails.

    Every write made by the import call has been rolled back by the time
    this reaches the caller.
    HTTP: 500
    """

    def __init__(
        self,
        message: str = "Import failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SnippetHubError):
    """
    Raised when database operations fail unexpectedly.

    HTTP: 500. The response message stays generic; the context is logged
    server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
