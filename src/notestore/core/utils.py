"""Path resolution and hashing helpers shared by the engine and adapters."""

import hashlib
import re
from pathlib import Path

from .model import NoteMeta

# Header span: an opening "---" line through the next line that is exactly
# "---". Whatever follows the closing delimiter is the separator and the body.
FRONTMATTER = re.compile(r"^---\r?\n(?P<header>[\s\S]*?\r?\n)?---(?=\r?\n|\Z)")


def get_full_path(note: NoteMeta, ws_root: Path) -> str:
    """
    Resolve the content store key of a note.

    The key depends on the note's vault and hierarchical name, never on its id,
    so notes can be organized by path. A note named "proj.a" in vault "notes"
    under workspace "/ws" lives at "/ws/notes/proj.a.md".
    """
    return str(Path(ws_root) / note.vault.fs_path / f"{note.fname}.md")


def gen_hash(text: str) -> str:
    """SHA256 hex digest of the complete raw content (header and body)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
