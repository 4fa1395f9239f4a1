"""
Rich renderables for timeline snapshots.

Everything here reads copies handed out by the session model and never
mutates them.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from rich.box import ROUNDED
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..session.ai import AiBlock, AiBlockStatus
from ..session.blocks import CommandBlock
from ..session.timeline import TimelineItem, TimelineKind

_AI_STATUS_STYLES = {
    AiBlockStatus.RUNNING: "yellow",
    AiBlockStatus.COMPLETED: "green",
    AiBlockStatus.FAILED: "bold red",
}


def format_timestamp(timestamp_ms: int) -> str:
    """Local 'YYYY-MM-DD HH:MM:SS' for a Unix-milliseconds timestamp."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(duration_ms: int | None) -> str:
    if duration_ms is None:
        return "-"
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    return f"{duration_ms / 1000:.1f}s"


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def command_status(block: CommandBlock) -> Text:
    if block.exit_code is None:
        return Text("running", style="yellow")
    if block.exit_code == 0:
        return Text("exit 0", style="green")
    return Text(f"exit {block.exit_code}", style="bold red")


def ai_status(block: AiBlock) -> Text:
    label = block.status.value
    if block.exit_code is not None and block.status is not AiBlockStatus.RUNNING:
        label = f"{label} ({block.exit_code})"
    return Text(label, style=_AI_STATUS_STYLES[block.status])


def render_timeline(items: Sequence[TimelineItem], title: str = "Timeline") -> Table:
    """One row per work unit, in timeline order."""
    table = Table(title=title, box=ROUNDED, show_lines=False, expand=False)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Started", no_wrap=True)
    table.add_column("Summary")
    table.add_column("Status", no_wrap=True)
    table.add_column("Duration", justify="right", no_wrap=True)
    table.add_column("Lines", justify="right", no_wrap=True)

    for item in items:
        block = item.block
        if item.kind is TimelineKind.COMMAND:
            marker = "★ " if block.bookmarked else ""
            kind = "cmd"
            summary = Text(f"{marker}$ {truncate(block.command, 60)}")
            status = command_status(block)
        else:
            kind = "ai"
            summary = Text(f"{block.tool.label}: {truncate(block.prompt, 50)}")
            if block.context_block_ids:
                refs = ", ".join(f"#{i}" for i in block.context_block_ids)
                summary.append(f"  [{refs}]", style="dim")
            status = ai_status(block)

        table.add_row(
            kind,
            str(block.id),
            format_timestamp(item.timestamp_unix_ms),
            summary,
            status,
            format_duration(block.duration_ms),
            str(len(block.output_lines)),
        )

    return table


def render_command_block(block: CommandBlock, max_lines: int = 20) -> Panel:
    """Panel with a block's command header and the tail of its output."""
    header = Text()
    header.append(f"$ {block.command}", style="bold")
    header.append(f"   {block.working_directory}", style="dim")

    tail = block.output_lines[-max_lines:] if max_lines > 0 else []
    body = Text("\n".join(tail)) if tail else Text("(no output)", style="dim")
    hidden = len(block.output_lines) - len(tail)

    parts: list = [header]
    if hidden > 0:
        parts.append(Text(f"... {hidden} earlier lines", style="dim"))
    parts.append(body)

    return Panel(
        Group(*parts),
        title=f"Block #{block.id}",
        subtitle=command_status(block),
        box=ROUNDED,
    )


def render_history(matches: Sequence[str], query: str = "") -> Table:
    title = f"History matching '{query}'" if query.strip() else "Recent history"
    table = Table(title=title, box=ROUNDED, show_header=False, min_width=len(title) + 4)
    table.add_column("#", justify="right", style="dim", no_wrap=True)
    table.add_column("Command")
    for idx, command in enumerate(matches, start=1):
        table.add_row(str(idx), command)
    return table
