"""Tests for batched find with partial-failure aggregation."""

import asyncio

import pytest

from fakes import FlakyMetadataStore, make_note
from notestore.adapters.sqlite_metadata_store import SQLiteMetadataStore
from notestore.adapters.yaml_codec import YamlNoteSerializer
from notestore.core.errors import (
    BackendError,
    CompositeError,
    ErrorStatus,
    MalformedContentError,
    UnsupportedOperationError,
)
from notestore.core.model import FindNoteOpts, NoteLoc, VaultRef
from notestore.core.store import NoteStore


async def _corrupt(store, note_id):
    """Overwrite a note's content with text that has no frontmatter."""
    meta = (await store.get_metadata(note_id)).data
    await store.content_store.write(store.resolve_path(meta, store.ws_root), "no header here\n")


@pytest.mark.anyio
async def test_find_all_notes(store):
    for i in range(3):
        await store.write(f"n{i}", make_note(f"n{i}", body=f"body {i}"))

    resp = await store.find(FindNoteOpts())
    assert resp.error is None
    assert sorted(n.id for n in resp.data) == ["n0", "n1", "n2"]
    assert all(n.content_hash for n in resp.data)


@pytest.mark.anyio
async def test_find_returns_partial_success_and_composite_error(store):
    for i in range(5):
        await store.write(f"n{i}", make_note(f"n{i}", body=f"body {i}"))
    await _corrupt(store, "n1")
    await _corrupt(store, "n3")

    resp = await store.find(FindNoteOpts())
    assert sorted(n.id for n in resp.data) == ["n0", "n2", "n4"]
    assert isinstance(resp.error, CompositeError)
    assert len(resp.error) == 2
    assert all(isinstance(e, MalformedContentError) for e in resp.error)
    assert sorted(e.note_id for e in resp.error) == ["n1", "n3"]


@pytest.mark.anyio
async def test_find_all_failing(store):
    await store.write("only", make_note("only", body="x"))
    await _corrupt(store, "only")

    resp = await store.find(FindNoteOpts())
    assert resp.data == []
    assert len(resp.error) == 1


@pytest.mark.anyio
async def test_find_no_matches(store):
    resp = await store.find(FindNoteOpts(fname="missing"))
    assert resp.data == []
    assert resp.error is None
    assert resp.ok


@pytest.mark.anyio
async def test_find_metadata_failure_is_wrapped(ws_root, content_store, metadata_store):
    store = NoteStore(
        content_store,
        FlakyMetadataStore(metadata_store, fail_on={"find"}),
        ws_root,
        YamlNoteSerializer(),
    )

    resp = await store.find(FindNoteOpts())
    assert resp.data == []
    assert isinstance(resp.error, CompositeError)
    assert resp.error.status is ErrorStatus.MULTIPLE_ERRORS
    assert len(resp.error) == 1
    assert isinstance(resp.error.errors[0], BackendError)


@pytest.mark.anyio
async def test_find_metadata_failure_passes_through(ws_root, content_store, metadata_store):
    store = NoteStore(
        content_store,
        FlakyMetadataStore(metadata_store, fail_on={"find"}),
        ws_root,
        YamlNoteSerializer(),
    )

    resp = await store.find_metadata(FindNoteOpts())
    assert isinstance(resp.error, BackendError)


@pytest.mark.anyio
async def test_find_with_unopenable_sqlite_db_is_wrapped(ws_root, content_store):
    blocker = ws_root / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = NoteStore(
        content_store,
        SQLiteMetadataStore(db_path=blocker / "m.sqlite"),
        ws_root,
        YamlNoteSerializer(),
    )

    resp = await store.find(FindNoteOpts())
    assert resp.data == []
    assert isinstance(resp.error, CompositeError)
    assert isinstance(resp.error.errors[0], BackendError)


@pytest.mark.anyio
async def test_find_filters(store):
    await store.write("a", make_note("a", fname="Proj.A", body="x"))
    await store.write("b", make_note("b", fname="proj.b", body="x", stub=True))
    await store.write("c", make_note("c", fname="proj.a", body="x", vault=VaultRef("other")))

    by_name = await store.find(FindNoteOpts(fname="proj.a"))
    assert sorted(n.id for n in by_name.data) == ["a", "c"]

    by_vault = await store.find(FindNoteOpts(vault=VaultRef("other")))
    assert [n.id for n in by_vault.data] == ["c"]

    no_stubs = await store.find(FindNoteOpts(exclude_stub=True))
    assert sorted(n.id for n in no_stubs.data) == ["a", "c"]


@pytest.mark.anyio
async def test_find_reads_concurrently(store):
    """All per-note reads are in flight before any of them completes."""
    for i in range(4):
        await store.write(f"n{i}", make_note(f"n{i}", body="x"))

    inner = store.content_store
    in_flight = 0
    peak = 0

    class SlowContentStore:
        async def read(self, key):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await inner.read(key)

    store.content_store = SlowContentStore()
    resp = await store.find(FindNoteOpts())
    assert len(resp.data) == 4
    assert peak == 4


@pytest.mark.anyio
async def test_rename_is_unsupported_and_touches_nothing(store, metadata_store):
    await store.write("r1", make_note("r1", fname="old", body="x"))

    resp = await store.rename(NoteLoc("old"), NoteLoc("new"))
    assert isinstance(resp.error, UnsupportedOperationError)
    assert resp.error.status is ErrorStatus.NOT_IMPLEMENTED
    assert (await metadata_store.get("r1")).fname == "old"
    assert (await store.get("r1")).data.body == "x"
