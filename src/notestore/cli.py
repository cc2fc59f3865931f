"""CLI for notestore - split metadata/content note storage."""

import argparse
import asyncio
import json
import platform
import sys
import time
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.yaml_codec import parse_header
from .core.model import FindNoteOpts, NoteLoc, NoteProps, VaultRef
from .runtime import Runtime, build_runtime


def _parse_value(value_str: str) -> Any:
    """Best-effort typing of a command line value."""
    if value_str.startswith("{") or value_str.startswith("["):
        try:
            return json.loads(value_str)
        except json.JSONDecodeError:
            return value_str
    if value_str.lower() in ("true", "false"):
        return value_str.lower() == "true"
    try:
        if "." in value_str:
            return float(value_str)
        return int(value_str)
    except ValueError:
        return value_str


def _print_error(error: Any) -> None:
    print(f"Error: {error}", file=sys.stderr)


def _now_ms() -> int:
    return int(time.time() * 1000)


def cmd_new(args: argparse.Namespace, rt: Runtime) -> int:
    """Create a new note."""
    custom: dict[str, Any] = {}
    for kv in args.custom:
        if "=" not in kv:
            print(f"Invalid format: {kv}. Expected key=value", file=sys.stderr)
            return 1
        k, _, val = kv.partition("=")
        custom[k.strip()] = _parse_value(val.strip())

    if args.body_file:
        body = Path(args.body_file).read_text(encoding="utf-8")
    else:
        body = args.body or ""

    now = _now_ms()
    note = NoteProps(
        id=rt.idgen.new_id(),
        fname=args.fname,
        vault=VaultRef(args.vault) if args.vault else rt.default_vault,
        title=args.title or args.fname.split(".")[-1],
        created=now,
        updated=now,
        tags=list(args.tag),
        custom=custom,
        body=body,
    )
    resp = asyncio.run(rt.store.write(note.id, note))
    if resp.error:
        _print_error(resp.error)
        return 1

    if args.json:
        print(json.dumps({"id": note.id}))
    elif not args.quiet:
        print(note.id)
    return 0


def cmd_get(args: argparse.Namespace, rt: Runtime) -> int:
    """Print a note's body, or the whole merged note with --json."""
    resp = asyncio.run(rt.store.get(args.id))
    if resp.error:
        _print_error(resp.error)
        return 1

    if args.json:
        print(json.dumps(resp.data.to_dict()))
    else:
        print(resp.data.body, end="" if resp.data.body.endswith("\n") else "\n")
    return 0


def cmd_meta(args: argparse.Namespace, rt: Runtime) -> int:
    """Print metadata without touching content."""
    resp = asyncio.run(rt.store.get_metadata(args.id))
    if resp.error:
        _print_error(resp.error)
        return 1

    data = resp.data.to_dict()
    if args.json:
        print(json.dumps(data))
    else:
        for key, value in data.items():
            print(f"{key}={value}")
    return 0


def cmd_cat(args: argparse.Namespace, rt: Runtime) -> int:
    """Print raw stored content (frontmatter and body)."""

    async def _cat() -> Any:
        meta = await rt.store.get_metadata(args.id)
        if meta.error:
            return meta
        return await rt.store.get_non_metadata(rt.store.resolve_path(meta.data, rt.store.ws_root))

    resp = asyncio.run(_cat())
    if resp.error:
        _print_error(resp.error)
        return 1

    if args.json:
        print(json.dumps({"header": parse_header(resp.data), "raw": resp.data}, default=str))
    else:
        print(resp.data, end="")
    return 0


def cmd_find(args: argparse.Namespace, rt: Runtime) -> int:
    """Find notes by metadata; malformed notes are skipped and reported."""
    opts = FindNoteOpts(
        fname=args.fname,
        vault=VaultRef(args.vault) if args.vault else None,
        exclude_stub=args.exclude_stub,
    )
    resp = asyncio.run(rt.store.find(opts))

    if args.json:
        print(json.dumps({
            "data": [note.to_dict() for note in resp.data],
            "errors": [e.to_dict() for e in resp.error] if resp.error else [],
        }))
    else:
        for note in resp.data:
            print(f"{note.id}\t{note.fname}\t{note.title}")

    if resp.error:
        if not args.quiet:
            for e in resp.error:
                print(f"Warning: {e}", file=sys.stderr)
            print(f"Warning: {len(resp.error)} note(s) skipped", file=sys.stderr)
        if not resp.data:
            return 1
    return 0


def cmd_write(args: argparse.Namespace, rt: Runtime) -> int:
    """Write a full note from a JSON document."""
    if args.file == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(args.file).read_text(encoding="utf-8")
    try:
        note = NoteProps.from_dict(json.loads(raw))
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        print(f"Invalid note document: {e}", file=sys.stderr)
        return 1

    resp = asyncio.run(rt.store.write(args.id, note))
    if resp.error:
        _print_error(resp.error)
        return 1
    if not args.quiet:
        print(f"Wrote {resp.data}")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Runtime) -> int:
    """Delete a note (content first, then metadata)."""
    if not args.yes:
        response = input(f"Delete note {args.id}? [y/N] ")
        if response.lower() not in ("y", "yes"):
            print("Aborted")
            return 0

    resp = asyncio.run(rt.store.delete(args.id))
    if resp.error:
        _print_error(resp.error)
        return 1
    if not args.quiet:
        print(f"Deleted {args.id}")
    return 0


def cmd_rename(args: argparse.Namespace, rt: Runtime) -> int:
    """Rename a note (not supported by the store yet)."""

    async def _rename() -> Any:
        meta = await rt.store.get_metadata(args.id)
        if meta.error:
            return meta
        return await rt.store.rename(
            NoteLoc(meta.data.fname, meta.data.vault),
            NoteLoc(args.new_fname, meta.data.vault),
        )

    resp = asyncio.run(_rename())
    if resp.error:
        _print_error(resp.error)
        return 1
    return 0


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = args.token
    token = None
    if token_arg == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
    else:
        token = token_arg

    app = create_app(rt, token=token)
    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def _version_string() -> str:
    return (
        f"notestore {__version__} "
        f"(python {platform.python_version()}, platform {platform.platform()})"
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="nstore", description="Split metadata/content note store"
    )
    parser.add_argument("--version", action="version", version=_version_string())
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/notestore.toml, root/notestore.toml)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Workspace root (overrides config)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to SQLite metadata DB (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_new = subparsers.add_parser("new", help="Create a new note")
    parser_new.add_argument("fname", help="Hierarchical name, e.g. proj.notes.a")
    parser_new.add_argument("--title", default=None)
    parser_new.add_argument("--body", default=None)
    parser_new.add_argument("--body-file", default=None)
    parser_new.add_argument("--vault", default=None, help="Vault fs_path (default: first vault)")
    parser_new.add_argument("--tag", action="append", default=[])
    parser_new.add_argument("--custom", action="append", default=[], help="key=value")

    parser_get = subparsers.add_parser("get", help="Print a note")
    parser_get.add_argument("id")

    parser_meta = subparsers.add_parser("meta", help="Print note metadata")
    parser_meta.add_argument("id")

    parser_cat = subparsers.add_parser("cat", help="Print raw stored content")
    parser_cat.add_argument("id")

    parser_find = subparsers.add_parser("find", help="Find notes by metadata")
    parser_find.add_argument("--fname", default=None)
    parser_find.add_argument("--vault", default=None)
    parser_find.add_argument("--exclude-stub", action="store_true")

    parser_write = subparsers.add_parser("write", help="Write a note from JSON")
    parser_write.add_argument("id")
    parser_write.add_argument("file", help="JSON note document, '-' for stdin")

    parser_rm = subparsers.add_parser("rm", help="Delete a note")
    parser_rm.add_argument("id")
    parser_rm.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    parser_rename = subparsers.add_parser("rename", help="Rename a note")
    parser_rename.add_argument("id")
    parser_rename.add_argument("new_fname")

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default="127.0.0.1")
    parser_serve.add_argument("--port", type=int, default=8765)
    parser_serve.add_argument(
        "--token", default="auto", help="Bearer token, 'auto' to generate, 'none' to disable"
    )

    args = parser.parse_args()

    rt = build_runtime(
        ws_root=args.root,
        db_path=args.db,
        config_path=args.config,
    )

    handlers = {
        "new": cmd_new,
        "get": cmd_get,
        "meta": cmd_meta,
        "cat": cmd_cat,
        "find": cmd_find,
        "write": cmd_write,
        "rm": cmd_rm,
        "rename": cmd_rename,
        "serve": cmd_serve,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
