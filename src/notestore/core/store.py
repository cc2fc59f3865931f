import asyncio
import logging
from pathlib import Path

from .errors import (
    CompositeError,
    IdentityMismatchError,
    MalformedContentError,
    NoteStoreError,
    UnsupportedOperationError,
)
from .model import FindNoteOpts, NoteId, NoteLoc, NoteMeta, NoteProps
from .ports import ContentStore, MetadataStore, NoteSerializer, PathResolver
from .results import BulkResp, Resp
from .utils import FRONTMATTER, gen_hash, get_full_path


class NoteStore:
    """
    Stores a note's metadata and its content in two independent stores and
    merges them back into a single NoteProps on read.

    Writes go metadata first, deletes go content first. Neither is atomic
    across the two stores: a failed content write leaves the new metadata in
    place, and a failed metadata delete leaves a note without content. In both
    cases the metadata still knows where the content is (or was).
    """

    def __init__(
        self,
        content_store: ContentStore,
        metadata_store: MetadataStore,
        ws_root: Path,
        serializer: NoteSerializer,
        resolve_path: PathResolver = get_full_path,
        logger: logging.Logger | None = None,
    ):
        self.content_store = content_store
        self.metadata_store = metadata_store
        self.ws_root = Path(ws_root)
        self.serializer = serializer
        self.resolve_path = resolve_path
        self.logger = logger or logging.getLogger(__name__)

    async def get(self, key: NoteId) -> Resp[NoteProps]:
        self.logger.info("Getting NoteProps for %s", key)
        metadata = await self.get_metadata(key)
        if metadata.error:
            return Resp(error=metadata.error)
        fpath = self.resolve_path(metadata.data, self.ws_root)
        non_metadata = await self.get_non_metadata(fpath)
        if non_metadata.error:
            return Resp(error=non_metadata.error)

        raw = non_metadata.data
        capture = FRONTMATTER.match(raw)
        if not capture:
            error = MalformedContentError(key, fpath)
            self.logger.warning("%s", error.message)
            return Resp(error=error)

        # Skip the newline that follows the closing delimiter
        body = raw[capture.end() + 1 :]
        # content_hash is not trusted from metadata; content may have changed
        note = NoteProps.from_dict(
            {**metadata.data.to_dict(), "body": body, "content_hash": gen_hash(raw)}
        )
        return Resp(data=note)

    async def get_metadata(self, key: NoteId) -> Resp[NoteMeta]:
        try:
            return Resp(data=await self.metadata_store.get(key))
        except NoteStoreError as e:
            return Resp(error=e)

    async def get_non_metadata(self, fpath: str) -> Resp[str]:
        """Read raw content at an already-resolved path."""
        try:
            return Resp(data=await self.content_store.read(fpath))
        except NoteStoreError as e:
            return Resp(error=e)

    async def find(self, opts: FindNoteOpts) -> BulkResp[NoteProps]:
        self.logger.info("Finding notes for %s", opts)
        note_metadata = await self.find_metadata(opts)
        if note_metadata.error:
            return BulkResp(error=CompositeError([note_metadata.error]))

        responses = await asyncio.gather(
            *(self.get(meta.id) for meta in note_metadata.data)
        )
        errors: list[NoteStoreError] = []
        data: list[NoteProps] = []
        for resp in responses:
            if resp.error:
                errors.append(resp.error)
            else:
                data.append(resp.data)

        if errors:
            self.logger.warning(
                "Skipped %d of %d notes matching %s", len(errors), len(responses), opts
            )
        return BulkResp(
            data=data,
            error=CompositeError(errors) if errors else None,
        )

    async def find_metadata(self, opts: FindNoteOpts) -> Resp[list[NoteMeta]]:
        try:
            return Resp(data=await self.metadata_store.find(opts))
        except NoteStoreError as e:
            return Resp(error=e)

    async def write(self, key: NoteId, note: NoteProps) -> Resp[str]:
        self.logger.info("Writing note %s", key)
        meta_resp = await self.write_metadata(key, note)
        if meta_resp.error:
            return Resp(error=meta_resp.error)

        fpath = self.resolve_path(note, self.ws_root)
        content = self.serializer.serialize(note, exclude_stub=True)
        try:
            await self.content_store.write(fpath, content)
        except NoteStoreError as e:
            self.logger.warning("Metadata for %s written but content write failed: %s", key, e)
            return Resp(error=e)

        return Resp(data=key)

    async def write_metadata(self, key: NoteId, note: NoteProps) -> Resp[str]:
        if key != note.id:
            return Resp(error=IdentityMismatchError(key, note.id))
        try:
            await self.metadata_store.write(key, note.meta())
        except NoteStoreError as e:
            return Resp(error=e)

        return Resp(data=key)

    async def delete(self, key: NoteId) -> Resp[str]:
        self.logger.info("Deleting note %s", key)
        metadata = await self.get_metadata(key)
        if metadata.error:
            return Resp(error=metadata.error)
        fpath = self.resolve_path(metadata.data, self.ws_root)
        try:
            await self.content_store.delete(fpath)
        except NoteStoreError as e:
            return Resp(error=e)
        try:
            await self.metadata_store.delete(key)
        except NoteStoreError as e:
            self.logger.warning("Content for %s deleted but metadata delete failed: %s", key, e)
            return Resp(error=e)

        return Resp(data=key)

    async def rename(self, old_loc: NoteLoc, new_loc: NoteLoc) -> Resp[str]:
        # Renaming must move content and rewrite references in other notes;
        # until that exists, refuse instead of half-renaming.
        return Resp(error=UnsupportedOperationError("rename"))
