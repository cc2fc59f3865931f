from __future__ import annotations
from dataclasses import dataclass, field, fields, asdict
from typing import Any

NoteId = str


@dataclass(frozen=True)
class VaultRef:
    fs_path: str  # relative to the workspace root, or absolute
    name: str | None = None

    @classmethod
    def coerce(cls, value: "VaultRef | dict | str") -> "VaultRef":
        if isinstance(value, VaultRef):
            return value
        if isinstance(value, str):
            return cls(fs_path=value)
        return cls(fs_path=value["fs_path"], name=value.get("name"))


@dataclass(frozen=True)
class NoteLoc:
    fname: str
    vault: VaultRef | None = None


@dataclass
class NoteMeta:
    """
    Everything the metadata store knows about a note. The body lives in the
    content store and is never part of this record.
    """

    id: NoteId
    fname: str  # hierarchical, dot-delimited: "proj.notes.a"
    vault: VaultRef
    title: str = ""
    desc: str = ""
    created: int = 0  # epoch millis
    updated: int = 0
    parent: NoteId | None = None
    children: list[NoteId] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    custom: dict[str, Any] = field(default_factory=dict)
    stub: bool = False
    content_hash: str | None = None  # informational only, recomputed on read

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs["vault"] = VaultRef.coerce(kwargs["vault"])
        return cls(**kwargs)


@dataclass
class NoteProps(NoteMeta):
    """A full note: metadata merged with the parsed body."""

    body: str = ""

    def meta(self) -> NoteMeta:
        """Metadata projection: every field except ``body``."""
        data = self.to_dict()
        data.pop("body")
        return NoteMeta.from_dict(data)


@dataclass(frozen=True)
class FindNoteOpts:
    """
    Structured metadata query. Criteria are ANDed; no criteria matches all.
    """

    fname: str | None = None  # case-insensitive
    vault: VaultRef | None = None  # matched on fs_path
    exclude_stub: bool = False

    def matches(self, meta: NoteMeta) -> bool:
        if self.fname is not None and meta.fname.lower() != self.fname.lower():
            return False
        if self.vault is not None and meta.vault.fs_path != self.vault.fs_path:
            return False
        if self.exclude_stub and meta.stub:
            return False
        return True
