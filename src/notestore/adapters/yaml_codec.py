import io
from typing import Any

import yaml

from ..core.model import NoteProps
from ..core.ports import NoteSerializer
from ..core.utils import FRONTMATTER

# Written to the header in this order; custom properties follow.
_HEADER_FIELDS = ("id", "title", "desc", "updated", "created")


class YamlNoteSerializer(NoteSerializer):
    def header(self, note: NoteProps, exclude_stub: bool = False) -> dict[str, Any]:
        # parent/children, fname, vault and content_hash live in the metadata
        # store or are derived, so they never reach the file
        meta: dict[str, Any] = {k: getattr(note, k) for k in _HEADER_FIELDS}
        if note.tags:
            meta["tags"] = list(note.tags)
        for key, value in note.custom.items():
            meta.setdefault(key, value)
        if note.stub and not exclude_stub:
            meta["stub"] = True
        return meta

    def serialize(self, note: NoteProps, exclude_stub: bool = False) -> str:
        buf = io.StringIO()
        yaml.safe_dump(self.header(note, exclude_stub), buf, sort_keys=False, allow_unicode=True)
        # Body goes out verbatim so a read returns exactly what was written
        return f"---\n{buf.getvalue()}---\n{note.body}"


def parse_header(text: str) -> dict[str, Any]:
    """Decode the YAML header of raw note content; {} if there is none."""
    m = FRONTMATTER.match(text)
    if not m:
        return {}
    return yaml.safe_load(m.group("header") or "") or {}
