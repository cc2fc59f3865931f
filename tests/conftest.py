"""Shared fixtures for note store tests."""

import tempfile
from pathlib import Path

import pytest

from notestore.adapters.fs_content_store import FsContentStore
from notestore.adapters.memory_metadata_store import InMemoryMetadataStore
from notestore.adapters.yaml_codec import YamlNoteSerializer
from notestore.core.store import NoteStore


@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Restrict anyio tests to asyncio only (trio is not installed)."""
    return request.param


@pytest.fixture
def ws_root():
    """Temporary workspace root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def metadata_store():
    return InMemoryMetadataStore()


@pytest.fixture
def content_store():
    return FsContentStore()


@pytest.fixture
def store(ws_root, content_store, metadata_store):
    """NoteStore over a real filesystem and an in-memory metadata store."""
    return NoteStore(content_store, metadata_store, ws_root, YamlNoteSerializer())

