"""
Tab strip state: an ordered list of tabs with stable identity.

Pure UI bookkeeping, independent of the session timeline. Tab ids come from
a monotonic counter; reordering and closing never change an existing id, and
the active tab is tracked by identity across moves.
"""

from __future__ import annotations

from dataclasses import dataclass

MAIN_TAB_LABEL = "main"


@dataclass
class TabEntry:
    id: int
    label: str


class TabState:
    """Ordered tabs plus the active index; there is always at least one tab."""

    def __init__(self) -> None:
        self._tabs: list[TabEntry] = [TabEntry(0, MAIN_TAB_LABEL)]
        self._active_idx = 0
        self._next_id = 1

    def add_tab(self, label: str | None = None) -> int:
        """Append a tab, make it active and return its id."""
        tab_id = self._next_id
        self._tabs.append(TabEntry(tab_id, label if label is not None else f"tab-{tab_id}"))
        self._active_idx = len(self._tabs) - 1
        self._next_id += 1
        return tab_id

    def close_tab(self, tab_id: int) -> bool:
        """Remove a tab. The last remaining tab cannot be closed."""
        if len(self._tabs) <= 1:
            return False
        idx = self._index_of(tab_id)
        if idx is None:
            return False

        self._tabs.pop(idx)
        if idx < self._active_idx or self._active_idx >= len(self._tabs):
            self._active_idx -= 1
        return True

    def active_id(self) -> int:
        if 0 <= self._active_idx < len(self._tabs):
            return self._tabs[self._active_idx].id
        return 0

    def active_label(self) -> str:
        if 0 <= self._active_idx < len(self._tabs):
            return self._tabs[self._active_idx].label
        return MAIN_TAB_LABEL

    def set_active_by_id(self, tab_id: int) -> bool:
        idx = self._index_of(tab_id)
        if idx is None:
            return False
        self._active_idx = idx
        return True

    def set_tab_label(self, tab_id: int, label: str) -> bool:
        idx = self._index_of(tab_id)
        if idx is None:
            return False
        self._tabs[idx].label = label
        return True

    def entries(self) -> list[tuple[int, str]]:
        return [(tab.id, tab.label) for tab in self._tabs]

    def replace_tabs(self, entries: list[tuple[int, str]], active_id: int) -> None:
        """Restore a saved tab strip; an empty list resets to the single main tab."""
        if not entries:
            self._tabs = [TabEntry(0, MAIN_TAB_LABEL)]
            self._active_idx = 0
            self._next_id = 1
            return

        self._tabs = [TabEntry(tab_id, label) for tab_id, label in entries]
        idx = self._index_of(active_id)
        self._active_idx = idx if idx is not None else 0
        self._next_id = max(tab.id for tab in self._tabs) + 1

    def reorder_tab_relative(self, dragging_id: int, target_id: int, insert_after: bool) -> bool:
        """Move ``dragging_id`` next to ``target_id``. Returns False for no-op moves."""
        if dragging_id == target_id:
            return False
        from_idx = self._index_of(dragging_id)
        target_idx = self._index_of(target_id)
        if from_idx is None or target_idx is None:
            return False

        destination = target_idx + 1 if insert_after else target_idx
        if from_idx < destination:
            destination -= 1
        if destination == from_idx:
            return False

        active_id = self.active_id()
        dragged = self._tabs.pop(from_idx)
        self._tabs.insert(min(destination, len(self._tabs)), dragged)
        self._active_idx = self._index_of(active_id) or 0
        return True

    def __len__(self) -> int:
        return len(self._tabs)

    def _index_of(self, tab_id: int) -> int | None:
        for idx, tab in enumerate(self._tabs):
            if tab.id == tab_id:
                return idx
        return None
