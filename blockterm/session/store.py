"""
File persistence for session snapshots.

Snapshots are written as YAML by default, or JSON when the file name ends in
``.json``. Writes go to a temporary sibling first and are then renamed over
the target, so a crash mid-write leaves the previous snapshot intact.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import CorruptedSessionError, SessionSaveError
from ..core.logging import get_logger
from .timeline import SessionSnapshot, SessionTimeline

logger = get_logger(__name__)


class SessionStore:
    """Load and save one snapshot file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def is_json(self) -> bool:
        return self.path.suffix.lower() == ".json"

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, snapshot: SessionSnapshot) -> Path:
        """Atomically write the snapshot. Raises SessionSaveError on failure."""
        data = snapshot.to_dict()
        if self.is_json:
            text = json.dumps(data, indent=2)
        else:
            text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            raise SessionSaveError(f"{self.path}: {exc}") from exc

        logger.debug(
            "Saved session snapshot to %s (%d blocks, %d AI blocks)",
            self.path,
            len(snapshot.blocks),
            len(snapshot.ai_blocks),
        )
        return self.path

    def load(self) -> SessionSnapshot | None:
        """Read the snapshot, or None if the file does not exist."""
        if not self.path.exists():
            return None

        try:
            text = self.path.read_text(encoding="utf-8")
            data: Any = json.loads(text) if self.is_json else yaml.safe_load(text)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise CorruptedSessionError(f"{self.path}: {exc}") from exc

        if data is None:
            return SessionSnapshot()
        if not isinstance(data, dict):
            raise CorruptedSessionError(f"{self.path}: expected a mapping, got {type(data).__name__}")

        try:
            return SessionSnapshot.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptedSessionError(f"{self.path}: {exc!r}") from exc

    def save_timeline(self, timeline: SessionTimeline) -> Path:
        return self.save(timeline.to_snapshot())

    def load_timeline(self) -> SessionTimeline:
        """Restore the saved timeline, or start a fresh one if nothing is saved."""
        snapshot = self.load()
        if snapshot is None:
            return SessionTimeline()
        return SessionTimeline.from_snapshot(snapshot)
