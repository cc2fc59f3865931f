"""Tests for note model, errors and path resolution."""

from pathlib import Path

import pytest

from fakes import make_note
from notestore.core.errors import (
    BackendError,
    CompositeError,
    ErrorSeverity,
    MalformedContentError,
    NotFoundError,
)
from notestore.core.model import FindNoteOpts, NoteMeta, NoteProps, VaultRef
from notestore.core.utils import gen_hash, get_full_path


def test_meta_projection_drops_body_only():
    note = make_note("a", body="text", title="T", custom={"k": "v"}, content_hash="h")
    meta = note.meta()

    assert type(meta) is NoteMeta
    assert meta.title == "T"
    assert meta.custom == {"k": "v"}
    assert meta.content_hash == "h"
    assert "body" not in meta.to_dict()


def test_from_dict_ignores_unknown_and_coerces_vault():
    note = NoteProps.from_dict(
        {"id": "a", "fname": "a", "vault": {"fs_path": "v", "name": "V"}, "extra": 1}
    )
    assert note.vault == VaultRef("v", "V")
    assert NoteMeta.from_dict({"id": "a", "fname": "a", "vault": "v"}).vault == VaultRef("v")


def test_find_opts_matches():
    meta = make_note("a", fname="Proj.A", stub=True).meta()
    assert FindNoteOpts().matches(meta)
    assert FindNoteOpts(fname="proj.a").matches(meta)
    assert not FindNoteOpts(fname="proj").matches(meta)
    assert not FindNoteOpts(vault=VaultRef("elsewhere")).matches(meta)
    assert not FindNoteOpts(exclude_stub=True).matches(meta)


def test_full_path_uses_vault_and_fname():
    note = make_note("id-not-used", fname="proj.a", vault=VaultRef("vault1"))
    assert get_full_path(note, Path("/ws")) == str(Path("/ws") / "vault1" / "proj.a.md")


def test_gen_hash_is_sha256_hex():
    assert gen_hash("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert gen_hash("a") != gen_hash("b")


def test_composite_error_requires_members():
    with pytest.raises(ValueError):
        CompositeError([])


def test_composite_error_severity_and_dict():
    minor = CompositeError([NotFoundError("a"), MalformedContentError("b", "/p/b.md")])
    assert minor.severity is ErrorSeverity.MINOR
    assert len(minor) == 2

    fatal = CompositeError([NotFoundError("a"), BackendError("disk on fire")])
    assert fatal.severity is ErrorSeverity.FATAL

    data = minor.to_dict()
    assert data["status"] == "multiple_errors"
    assert [e["error"] for e in data["errors"]] == ["NotFoundError", "MalformedContentError"]
