"""Runtime wiring helper for CLI and API applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_content_store import FsContentStore
from .adapters.idgen import RandomId
from .adapters.memory_metadata_store import InMemoryMetadataStore
from .adapters.sqlite_metadata_store import SQLiteMetadataStore
from .adapters.yaml_codec import YamlNoteSerializer
from .config import NoteStoreConfig, load_config
from .core.model import VaultRef
from .core.ports import ContentStore, MetadataStore
from .core.store import NoteStore
from .logging_setup import setup_logging


@dataclass
class Runtime:
    """Container for all wired components."""
    store: NoteStore
    metadata_store: MetadataStore
    content_store: ContentStore
    idgen: RandomId
    config: NoteStoreConfig

    @property
    def default_vault(self) -> VaultRef:
        return self.config.workspace.vaults[0]


def build_runtime(
    ws_root: Path | None = None,
    db_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a workspace."""
    config = load_config(config_path=config_path, ws_root=ws_root)

    # CLI args win over config values
    if ws_root is not None:
        config.workspace.root = ws_root
    if db_path is not None:
        config.metadata.db = db_path

    logger = setup_logging(config.log.level)

    metadata_store: MetadataStore
    if config.metadata.backend == "memory":
        metadata_store = InMemoryMetadataStore()
    else:
        metadata_store = SQLiteMetadataStore(db_path=config.metadata.db)
    content_store = FsContentStore()

    store = NoteStore(
        content_store,
        metadata_store,
        config.workspace.root,
        YamlNoteSerializer(),
        logger=logger.getChild("store"),
    )

    return Runtime(
        store=store,
        metadata_store=metadata_store,
        content_store=content_store,
        idgen=RandomId(nbytes=config.id.bytes),
        config=config,
    )
