from ..core.errors import NotFoundError
from ..core.model import FindNoteOpts, NoteId, NoteMeta
from ..core.ports import MetadataStore


class InMemoryMetadataStore(MetadataStore):
    """
    Dict-backed metadata store. Rows are copied in and out, so callers never
    share mutable state with the store.
    """

    def __init__(self) -> None:
        self._rows: dict[NoteId, NoteMeta] = {}

    @staticmethod
    def _copy(meta: NoteMeta) -> NoteMeta:
        return NoteMeta.from_dict(meta.to_dict())

    async def get(self, id: NoteId) -> NoteMeta:
        if id not in self._rows:
            raise NotFoundError(id, f"No metadata for note {id}")
        return self._copy(self._rows[id])

    async def write(self, id: NoteId, meta: NoteMeta) -> str:
        self._rows[id] = self._copy(meta)
        return id

    async def delete(self, id: NoteId) -> str:
        if self._rows.pop(id, None) is None:
            raise NotFoundError(id, f"No metadata for note {id}")
        return id

    async def find(self, opts: FindNoteOpts) -> list[NoteMeta]:
        return [self._copy(m) for m in self._rows.values() if opts.matches(m)]

    def __contains__(self, id: object) -> bool:
        return id in self._rows
