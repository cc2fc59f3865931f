"""Configuration loader for notestore.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomllib

from .core.model import VaultRef

CONFIG_NAME = "notestore.toml"
METADATA_BACKENDS = ("sqlite", "memory")


@dataclass
class WorkspaceConfig:
    """Workspace root and the vaults under it."""
    root: Path
    vaults: list[VaultRef] = field(default_factory=lambda: [VaultRef("notes")])


@dataclass
class MetadataConfig:
    """Metadata store configuration."""
    backend: str
    db: Path


@dataclass
class IdConfig:
    """ID generation configuration."""
    bytes: int = 12


@dataclass
class LogConfig:
    level: str = "WARNING"


@dataclass
class NoteStoreConfig:
    """Complete notestore configuration."""
    workspace: WorkspaceConfig
    metadata: MetadataConfig
    id: IdConfig
    log: LogConfig


def load_config(config_path: Path | None = None, ws_root: Path | None = None) -> NoteStoreConfig:
    """
    Load configuration from notestore.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/notestore.toml
    3. ws_root/notestore.toml

    Args:
        config_path: Explicit path to config file
        ws_root: Workspace root for fallback search

    Returns:
        NoteStoreConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if ws_root:
        search_paths.append(ws_root / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    # Workspace
    ws_data = toml_data.get("workspace", {})
    root = Path(ws_data.get("root", ws_root or Path(".")))
    vaults = [VaultRef.coerce(v) for v in ws_data.get("vaults", [])]
    workspace = WorkspaceConfig(root=root, vaults=vaults) if vaults else WorkspaceConfig(root=root)

    # Metadata store
    md_data = toml_data.get("metadata", {})
    backend = md_data.get("backend", "sqlite")
    if backend not in METADATA_BACKENDS:
        raise ValueError(
            f"Unknown metadata backend {backend!r}; expected one of {', '.join(METADATA_BACKENDS)}"
        )
    metadata = MetadataConfig(
        backend=backend,
        db=Path(md_data.get("db", root / ".notestore" / "metadata.sqlite")),
    )

    id_data = toml_data.get("id", {})
    id_config = IdConfig(bytes=id_data.get("bytes", 12))

    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "WARNING")).upper())

    return NoteStoreConfig(
        workspace=workspace,
        metadata=metadata,
        id=id_config,
        log=log_config,
    )
