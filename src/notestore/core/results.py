from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .errors import CompositeError, NoteStoreError

T = TypeVar("T")


@dataclass
class Resp(Generic[T]):
    """Result of a single-item operation: either ``data`` or ``error``."""

    data: T | None = None
    error: NoteStoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BulkResp(Generic[T]):
    """
    Result of a batch operation. Both fields may be populated: ``data`` holds
    every item that succeeded, ``error`` aggregates every item that failed.
    """

    data: list[T] = field(default_factory=list)
    error: CompositeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
