"""CLI for ghostpath - full-path wiki links that display as short names."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.concealer import build_concealment, render_displayed
from .core.model import ConcealRange, Settings, VisibleWindow
from .runtime import build_runtime
from .vault_rewrite import apply_rewrite, diff_rewrite, rewrite_note


def _note_path(arg: str, rt: Any) -> str:
    """Accept either a filesystem path or a vault-relative path."""
    p = Path(arg)
    if p.exists():
        try:
            return rt.storage.relative(p)
        except ValueError:
            pass
    return Path(arg).as_posix().lstrip("/")


def cmd_rewrite(args: argparse.Namespace, rt: Any) -> int:
    """Rewrite short links in one note to full paths."""
    rel = _note_path(args.path, rt)
    result = rewrite_note(rt.storage, rt.index, rel, cursor=args.cursor)
    if result is None:
        print(f"Note {rel} not found", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "path": result.path,
            "changed": result.changed,
            "links": result.changes,
            "cursor": result.cursor,
        }))
    elif args.dry_run:
        print(diff_rewrite(result), end="")

    if not args.dry_run:
        written = apply_rewrite(rt.storage, result)
        if written and not args.quiet and not args.json:
            print(f"Rewrote {result.changes} link(s) in {result.path}")
    return 0


def cmd_rewrite_all(args: argparse.Namespace, rt: Any) -> int:
    """Rewrite short links in every note of the vault."""
    notes = 0
    links = 0
    for rel in rt.storage.list_notes():
        result = rewrite_note(rt.storage, rt.index, rel)
        if result is None or not result.changed:
            continue
        if args.dry_run:
            print(diff_rewrite(result), end="")
        elif not apply_rewrite(rt.storage, result):
            continue
        notes += 1
        links += result.changes

    if args.json:
        print(json.dumps({"notes": notes, "links": links, "dry_run": args.dry_run}))
    elif not args.quiet:
        verb = "Would rewrite" if args.dry_run else "Rewrote"
        print(f"{verb} {links} link(s) in {notes} note(s)")
    return 0


def cmd_conceal(args: argparse.Namespace, rt: Any) -> int:
    """Show which ranges of a note are concealed in the editor."""
    rel = _note_path(args.path, rt)
    text = rt.storage.read_raw(rel)
    if text is None:
        print(f"Note {rel} not found", file=sys.stderr)
        return 1

    if args.enabled is None:
        enabled = rt.settings.load().conceal_enabled
    else:
        enabled = args.enabled == "on"

    start = args.start if args.start is not None else 0
    end = args.end if args.end is not None else len(text)
    if not 0 <= start <= end <= len(text):
        print(f"Error: window {start}..{end} outside note (length {len(text)})", file=sys.stderr)
        return 1

    ranges = build_concealment([VisibleWindow.of(text, start, end)], enabled)

    if args.json or args.format == "json":
        print(json.dumps({
            "path": rel,
            "enabled": enabled,
            "ranges": [{"start": r.start, "end": r.end, "text": text[r.start:r.end]} for r in ranges],
        }, indent=2))
    else:
        print(render_displayed(text[start:end], [
            ConcealRange(r.start - start, r.end - start) for r in ranges
        ]), end="")
    return 0


def cmd_resolve(args: argparse.Namespace, rt: Any) -> int:
    """Resolve a short name to its full path."""
    path = rt.index.resolve(args.name, args.context or "")
    if path is None:
        if not args.quiet:
            print(f"Could not resolve: '{args.name}' (missing or ambiguous)", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps({"name": args.name, "path": path}))
    else:
        print(path)
    return 0


def cmd_settings_show(args: argparse.Namespace, rt: Any) -> int:
    """Print persisted settings."""
    settings = rt.settings.load()
    if args.json:
        print(json.dumps({"conceal_enabled": settings.conceal_enabled}))
    else:
        print(f"conceal: {'on' if settings.conceal_enabled else 'off'}")
    return 0


def cmd_settings_set(args: argparse.Namespace, rt: Any) -> int:
    """Toggle a setting and persist it."""
    settings = Settings(conceal_enabled=args.value == "on")
    rt.settings.save(settings)
    if not args.quiet:
        print(f"conceal: {args.value}")
    return 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Watch vault for changes and rewrite short links."""
    from .watch import watch_vault

    debounce_ms = args.debounce_ms
    if debounce_ms is None:
        debounce_ms = rt.config.rewrite.debounce_ms

    return watch_vault(
        storage=rt.storage,
        index=rt.index,
        debounce_ms=debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    import uvicorn

    from .api.app import create_app, generate_token

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=args.cors)

    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def version_string() -> str:
    return (
        f"ghostpath {__version__} "
        f"(python {platform.python_version()}, platform {platform.system().lower()})"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostpath", description="Store full-path wiki links, show short names"
    )
    parser.add_argument("--version", action="version", version=version_string())
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/ghostpath.toml, vault/ghostpath.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More log output (repeatable)"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_rewrite = subparsers.add_parser("rewrite", help="Rewrite short links in a note")
    parser_rewrite.add_argument("path", help="Note path (filesystem or vault-relative)")
    parser_rewrite.add_argument("--cursor", type=int, default=0, help="Cursor offset to remap")
    parser_rewrite.add_argument("--dry-run", action="store_true", help="Show diff, don't write")

    parser_all = subparsers.add_parser("rewrite-all", help="Rewrite short links in every note")
    parser_all.add_argument("--dry-run", action="store_true", help="Show diffs, don't write")

    parser_conceal = subparsers.add_parser("conceal", help="Show concealed prefixes of a note")
    parser_conceal.add_argument("path", help="Note path (filesystem or vault-relative)")
    parser_conceal.add_argument("--start", type=int, default=None, help="Visible window start")
    parser_conceal.add_argument("--end", type=int, default=None, help="Visible window end")
    parser_conceal.add_argument(
        "--enabled", choices=["on", "off"], default=None,
        help="Override the stored conceal setting"
    )
    parser_conceal.add_argument(
        "--format", choices=["json", "text"], default="text",
        help="Output format (default: text, the displayed form)"
    )

    parser_resolve = subparsers.add_parser("resolve", help="Resolve a short name to a full path")
    parser_resolve.add_argument("name", help="Short link name")
    parser_resolve.add_argument("--context", default=None, help="Path of the referring note")

    parser_settings = subparsers.add_parser("settings", help="Show or change settings")
    settings_sub = parser_settings.add_subparsers(dest="settings_cmd", required=True)
    settings_sub.add_parser("show", help="Print settings")
    parser_settings_set = settings_sub.add_parser("set", help="Change a setting")
    parser_settings_set.add_argument("key", choices=["conceal"])
    parser_settings_set.add_argument("value", choices=["on", "off"])

    parser_watch = subparsers.add_parser("watch", help="Watch vault and rewrite on save")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, 220)"
    )

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser_serve.add_argument("--port", type=int, default=8765, help="Port (default: 8765)")
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token: 'auto' to generate, 'none' to disable, or a literal token"
    )
    parser_serve.add_argument("--cors", action="store_true", help="Enable CORS")

    return parser


def configure_logging(level_name: str, verbose: int) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    if verbose == 1:
        level = min(level, logging.INFO)
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    rt = build_runtime(vault_path=args.vault, config_path=args.config)
    configure_logging(rt.config.log.level, args.verbose)

    handlers = {
        "rewrite": cmd_rewrite,
        "rewrite-all": cmd_rewrite_all,
        "conceal": cmd_conceal,
        "resolve": cmd_resolve,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }

    if args.cmd == "settings":
        settings_handlers = {
            "show": cmd_settings_show,
            "set": cmd_settings_set,
        }
        handler = settings_handlers.get(args.settings_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            logging.getLogger(__name__).debug("Command %s failed", args.cmd, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
