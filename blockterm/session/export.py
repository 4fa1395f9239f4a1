"""
Markdown export of command blocks.
"""

from __future__ import annotations

from collections.abc import Iterable

from .blocks import CommandBlock

EXPORT_TITLE = "# Terminal Session Export"


def _format_exit_code(exit_code: int | None) -> str:
    return "None" if exit_code is None else str(exit_code)


def block_to_markdown(block: CommandBlock) -> str:
    parts = [
        f"## Block #{block.id}\n\n",
        f"- Command: `{block.command}`\n",
        f"- CWD: `{block.working_directory}`\n",
        f"- Timestamp(ms): `{block.timestamp_unix_ms}`\n",
        f"- Exit Code: `{_format_exit_code(block.exit_code)}`\n",
        f"- Bookmarked: `{str(block.bookmarked).lower()}`\n\n",
        "```text\n",
    ]
    parts.extend(f"{line}\n" for line in block.output_lines)
    parts.append("```\n\n")
    return "".join(parts)


def blocks_to_markdown(blocks: Iterable[CommandBlock], pending_line: str = "") -> str:
    """Render blocks as one Markdown document, ending with the pending line if any."""
    out = [f"{EXPORT_TITLE}\n\n"]
    out.extend(block_to_markdown(block) for block in blocks)

    if pending_line.strip():
        out.append("## Pending Line\n\n")
        out.append("```text\n")
        out.append(f"{pending_line}\n")
        out.append("```\n")

    return "".join(out)
