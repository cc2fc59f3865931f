import asyncio
from pathlib import Path

from ..core.errors import BackendError, NotFoundError
from ..core.ports import ContentStore


class FsContentStore(ContentStore):
    """
    Note content as UTF-8 files. Keys are already-resolved file paths.
    """

    def _read(self, key: str) -> str:
        try:
            # newline="" so line endings are hashed as stored
            with open(key, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(key, f"No content file at {key}") from None
        except (OSError, UnicodeDecodeError) as e:
            raise BackendError(f"Failed to read {key}", key=key, cause=e) from e

    def _write(self, key: str, text: str) -> str:
        p = Path(key)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with open(p, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise BackendError(f"Failed to write {key}", key=key, cause=e) from e
        return key

    def _delete(self, key: str) -> str:
        try:
            Path(key).unlink()
        except FileNotFoundError:
            raise NotFoundError(key, f"No content file at {key}") from None
        except OSError as e:
            raise BackendError(f"Failed to delete {key}", key=key, cause=e) from e
        return key

    async def read(self, key: str) -> str:
        return await asyncio.to_thread(self._read, key)

    async def write(self, key: str, text: str) -> str:
        return await asyncio.to_thread(self._write, key, text)

    async def delete(self, key: str) -> str:
        return await asyncio.to_thread(self._delete, key)
