"""Error taxonomy for the note store.

Store adapters raise these; the engine hands them back to callers inside a
result object instead of raising. Every error carries a machine-readable
status and a severity so batch callers can decide whether to continue.
"""

from collections.abc import Iterator
from enum import Enum
from typing import Any


class ErrorStatus(Enum):
    NOT_FOUND = "not_found"
    BACKEND_ERROR = "backend_error"
    BAD_PARSE_FOR_NOTE = "bad_parse_for_note"
    WRITE_FAILED = "write_failed"
    MULTIPLE_ERRORS = "multiple_errors"
    NOT_IMPLEMENTED = "not_implemented"


class ErrorSeverity(Enum):
    MINOR = "minor"
    FATAL = "fatal"


class NoteStoreError(Exception):
    """Base class for every error the note store reports.

    Attributes:
        message: Human-readable error message
        status: Machine-readable error status
        severity: MINOR errors only affect the item at hand
        details: Additional context (note id, path, ...)
    """

    def __init__(
        self,
        message: str,
        status: ErrorStatus = ErrorStatus.BACKEND_ERROR,
        severity: ErrorSeverity = ErrorSeverity.FATAL,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status = status
        self.severity = severity
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a JSON-friendly dictionary."""
        return {
            "error": self.__class__.__name__,
            "status": self.status.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.status.name}] {self.message}"


class NotFoundError(NoteStoreError):
    """A store has no entry under the requested key."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(
            message or f"No entry found for {key}",
            status=ErrorStatus.NOT_FOUND,
            severity=ErrorSeverity.MINOR,
            details={"key": key},
        )
        self.key = key


class BackendError(NoteStoreError):
    """A store failed below the level of "missing entry" (I/O, database)."""

    def __init__(self, message: str, key: str | None = None, cause: Exception | None = None):
        details: dict[str, Any] = {}
        if key is not None:
            details["key"] = key
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, status=ErrorStatus.BACKEND_ERROR, details=details)
        self.key = key
        self.cause = cause


class MalformedContentError(NoteStoreError):
    """Raw content has no frontmatter header span."""

    def __init__(self, note_id: str, path: str):
        super().__init__(
            f"Frontmatter missing for file {path} associated with note {note_id}.",
            status=ErrorStatus.BAD_PARSE_FOR_NOTE,
            severity=ErrorSeverity.MINOR,
            details={"note_id": note_id, "path": path},
        )
        self.note_id = note_id
        self.path = path


class IdentityMismatchError(NoteStoreError):
    """A note was written under a key other than its own id."""

    def __init__(self, key: str, note_id: str):
        super().__init__(
            f"Ids don't match between key {key} and note {note_id}.",
            status=ErrorStatus.WRITE_FAILED,
            severity=ErrorSeverity.MINOR,
            details={"key": key, "note_id": note_id},
        )
        self.key = key
        self.note_id = note_id


class UnsupportedOperationError(NoteStoreError):
    def __init__(self, operation: str):
        super().__init__(
            f"{operation} is not supported by this note store",
            status=ErrorStatus.NOT_IMPLEMENTED,
            details={"operation": operation},
        )
        self.operation = operation


class CompositeError(NoteStoreError):
    """One or more independent failures from a batch operation.

    Even a single upstream failure is reported through this type, so callers
    of batch operations always deal with the same error shape.
    """

    def __init__(self, errors: list[NoteStoreError]):
        if not errors:
            raise ValueError("CompositeError needs at least one error")
        self.errors = list(errors)
        severity = (
            ErrorSeverity.MINOR
            if all(e.severity is ErrorSeverity.MINOR for e in self.errors)
            else ErrorSeverity.FATAL
        )
        super().__init__(
            f"{len(self.errors)} error(s): " + "; ".join(e.message for e in self.errors),
            status=ErrorStatus.MULTIPLE_ERRORS,
            severity=severity,
            details={"count": len(self.errors)},
        )

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[NoteStoreError]:
        return iter(self.errors)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["errors"] = [e.to_dict() for e in self.errors]
        return data
