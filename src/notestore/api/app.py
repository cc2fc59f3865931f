"""FastAPI application for the notestore local JSON API."""

import secrets
from typing import Any, NoReturn

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..core.errors import ErrorStatus, NoteStoreError
from ..core.model import FindNoteOpts, NoteLoc, NoteProps, VaultRef

_STATUS_CODES = {
    ErrorStatus.NOT_FOUND: 404,
    ErrorStatus.BAD_PARSE_FOR_NOTE: 422,
    ErrorStatus.WRITE_FAILED: 409,
    ErrorStatus.NOT_IMPLEMENTED: 501,
}


def _raise(error: NoteStoreError) -> NoReturn:
    raise HTTPException(
        status_code=_STATUS_CODES.get(error.status, 500),
        detail=error.to_dict(),
    )


def create_app(runtime: Any, token: str | None = None) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with a wired NoteStore
        token: Bearer token for authentication (None to disable auth)

    Returns:
        FastAPI application instance
    """
    store = runtime.store

    app = FastAPI(
        title="notestore API",
        description="Local JSON API for a split metadata/content note store",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.get("/health")  # type: ignore[misc]
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/notes")  # type: ignore[misc]
    async def find_notes(
        fname: str | None = Query(None, description="Exact hierarchical name (case-insensitive)"),
        vault: str | None = Query(None, description="Vault fs_path"),
        exclude_stub: bool = Query(False, description="Skip placeholder notes"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Find notes; notes that fail to load are listed under "errors"."""
        opts = FindNoteOpts(
            fname=fname,
            vault=VaultRef(vault) if vault else None,
            exclude_stub=exclude_stub,
        )
        resp = await store.find(opts)
        return {
            "data": [note.to_dict() for note in resp.data],
            "errors": [e.to_dict() for e in resp.error] if resp.error else [],
        }

    @app.get("/notes/{note_id}")  # type: ignore[misc]
    async def get_note(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Get merged note: metadata, body and content hash."""
        resp = await store.get(note_id)
        if resp.error:
            _raise(resp.error)
        return resp.data.to_dict()

    @app.get("/notes/{note_id}/meta")  # type: ignore[misc]
    async def get_note_meta(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Get note metadata only."""
        resp = await store.get_metadata(note_id)
        if resp.error:
            _raise(resp.error)
        return resp.data.to_dict()

    @app.put("/notes/{note_id}")  # type: ignore[misc]
    async def put_note(
        note_id: str,
        note: dict[str, Any] = Body(...),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Write metadata, then content."""
        try:
            props = NoteProps.from_dict(note)
        except (KeyError, TypeError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid note document: {e}") from e
        resp = await store.write(note_id, props)
        if resp.error:
            _raise(resp.error)
        return {"id": resp.data}

    @app.delete("/notes/{note_id}")  # type: ignore[misc]
    async def delete_note(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Delete content, then metadata."""
        resp = await store.delete(note_id)
        if resp.error:
            _raise(resp.error)
        return {"id": resp.data}

    @app.post("/notes/{note_id}/rename")  # type: ignore[misc]
    async def rename_note(
        note_id: str,
        fname: str = Query(..., description="New hierarchical name"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        meta = await store.get_metadata(note_id)
        if meta.error:
            _raise(meta.error)
        resp = await store.rename(
            NoteLoc(meta.data.fname, meta.data.vault),
            NoteLoc(fname, meta.data.vault),
        )
        if resp.error:
            _raise(resp.error)
        return {"id": note_id}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
