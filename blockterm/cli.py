"""
Command-line entry point for inspecting saved terminal sessions.

Subcommands read a snapshot file written by :class:`SessionStore` (or, for
``replay``, a raw captured byte stream) and render it with Rich.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console

from . import __version__
from .core.config import AppConfig, ConfigManager
from .core.exceptions import BlocktermError, SessionNotFoundError
from .core.logging import get_logger, setup_logging
from .session import SessionStore, SessionTimeline, TerminalSession
from .ui.timeline_view import render_command_block, render_history, render_timeline

logger = get_logger(__name__)

console = Console()


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config:
        return AppConfig.load_from_file(Path(args.config))
    return ConfigManager().config


def _load_timeline(path: str) -> SessionTimeline:
    store = SessionStore(Path(path))
    snapshot = store.load()
    if snapshot is None:
        raise SessionNotFoundError(path)
    return SessionTimeline.from_snapshot(snapshot)


def cmd_export(args: argparse.Namespace) -> int:
    timeline = _load_timeline(args.snapshot)
    markdown = timeline.export_markdown(bookmarks_only=args.bookmarks_only)
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(markdown, encoding="utf-8")
        console.print(f"[green]Exported {timeline.block_count()} blocks to {out_path}[/green]")
    else:
        sys.stdout.write(markdown)
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    timeline = _load_timeline(args.snapshot)
    matches = timeline.history_search(args.query, args.limit)
    if not matches:
        console.print("[dim]No matching commands.[/dim]")
        return 0
    console.print(render_history(matches, args.query))
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    timeline = _load_timeline(args.snapshot)
    ids = timeline.search_block_ids(args.query, args.limit)
    if not ids:
        console.print(f"[dim]No blocks match '{args.query}'.[/dim]")
        return 0
    for block_id in ids:
        block = timeline.block_by_id(block_id)
        if block is not None:
            console.print(render_command_block(block, max_lines=args.lines))
    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    timeline = _load_timeline(args.snapshot)
    items = timeline.timeline_items()
    if not items:
        console.print("[dim]Timeline is empty.[/dim]")
        return 0
    console.print(render_timeline(items))
    if timeline.pending_line:
        console.print(f"[dim]pending:[/dim] {timeline.pending_line}")
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    config = _load_config(args)
    if args.width is not None:
        config.terminal.viewport_width = args.width
    if args.height is not None:
        config.terminal.viewport_height = args.height

    raw_path = Path(args.rawfile)
    if not raw_path.exists():
        raise SessionNotFoundError(str(raw_path))

    session = TerminalSession(config=config)
    with open(raw_path, "rb") as f:
        while chunk := f.read(args.chunk_size):
            session.feed(chunk)

    for line in session.viewport():
        console.print(line, markup=False, highlight=False, soft_wrap=True)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockterm",
        description="Inspect, search and export saved terminal session timelines.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to a blockterm YAML/JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Export command blocks as Markdown")
    export.add_argument("snapshot", help="Session snapshot file (.yaml or .json)")
    export.add_argument("--bookmarks-only", action="store_true", help="Only bookmarked blocks")
    export.add_argument("-o", "--output", help="Write to this file instead of stdout")
    export.set_defaults(func=cmd_export)

    history = sub.add_parser("history", help="Search command history")
    history.add_argument("snapshot")
    history.add_argument("query", nargs="?", default="")
    history.add_argument("-n", "--limit", type=int, default=20)
    history.set_defaults(func=cmd_history)

    search = sub.add_parser("search", help="Find blocks by command or output text")
    search.add_argument("snapshot")
    search.add_argument("query")
    search.add_argument("-n", "--limit", type=int, default=10)
    search.add_argument("--lines", type=int, default=20, help="Output lines shown per block")
    search.set_defaults(func=cmd_search)

    timeline = sub.add_parser("timeline", help="Show commands and AI runs in order")
    timeline.add_argument("snapshot")
    timeline.set_defaults(func=cmd_timeline)

    replay = sub.add_parser("replay", help="Parse a raw captured byte stream")
    replay.add_argument("rawfile")
    replay.add_argument("--width", type=int)
    replay.add_argument("--height", type=int)
    replay.add_argument("--chunk-size", type=int, default=4096)
    replay.set_defaults(func=cmd_replay)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        return args.func(args)
    except BlocktermError as exc:
        logger.debug("Command failed", exc_info=True)
        message = getattr(exc, "user_message", str(exc))
        console.print(f"[bold red]Error:[/bold red] {message}")
        hint = getattr(exc, "recovery_hint", None)
        if hint:
            console.print(f"[dim]{hint}[/dim]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
