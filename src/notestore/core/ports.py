from pathlib import Path
from typing import Protocol

from .model import FindNoteOpts, NoteId, NoteMeta, NoteProps


class ContentStore(Protocol):
    """
    Raw note text addressed by an already-resolved path. Missing entries raise
    NotFoundError, anything else BackendError.
    """

    async def read(self, key: str) -> str:
        pass

    async def write(self, key: str, text: str) -> str:
        pass

    async def delete(self, key: str) -> str:
        pass


class MetadataStore(Protocol):
    """
    Structured note metadata keyed by note id; supports queries.
    """

    async def get(self, id: NoteId) -> NoteMeta:
        pass

    async def write(self, id: NoteId, meta: NoteMeta) -> str:
        pass

    async def delete(self, id: NoteId) -> str:
        pass

    async def find(self, opts: FindNoteOpts) -> list[NoteMeta]:
        pass


class PathResolver(Protocol):
    """
    Pure function of metadata and workspace root -> content store key.
    """

    def __call__(self, note: NoteMeta, ws_root: Path) -> str:
        pass


class NoteSerializer(Protocol):
    """
    Produce the header-plus-body text persisted in the content store.
    """

    def serialize(self, note: NoteProps, exclude_stub: bool = False) -> str:
        pass
