"""
Host view for one selectable list.

Binds a SelectionManager to a store list through a snapshot provider and
the current filter text. The view renders rows with checkbox state, gates
the select-all and invert toolbar actions behind batch mode, and hands the
selected IDs to the store's bulk delete.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from core.ui_logic import Identifiable, SelectionManager

logger = logging.getLogger(__name__)

SnapshotProvider = Callable[[Optional[str]], Sequence[Identifiable]]
BatchDelete = Callable[[List[str]], int]


@dataclass(slots=True)
class RowInfo:
    """A rendered list row."""
    item_id: str
    label: str
    checked: bool

    def __str__(self) -> str:
        return f"[{'x' if self.checked else ' '}] {self.label} ({self.item_id})"


class BatchListView:
    """
    One list view with batch selection.

    The view keeps no copy of the list. Every read goes through
    ``snapshot_provider`` with the current filter, so bulk selection always
    acts on what is visible right now.
    """

    def __init__(
        self,
        name: str,
        snapshot_provider: SnapshotProvider,
        batch_delete: BatchDelete,
        label: Callable[[Identifiable], str] = lambda item: getattr(item, "name", "") or item.id,
    ) -> None:
        """
        Initialize list view.

        Args:
            name: View name shown in prompts, e.g. "subscriptions"
            snapshot_provider: Returns the current items for a filter text
            batch_delete: Deletes items by ID, returns number removed
            label: Formats an item for display
        """
        self.name = name
        self.filter_text: Optional[str] = None
        self._snapshot_provider = snapshot_provider
        self._batch_delete = batch_delete
        self._label = label
        self.selection: SelectionManager = SelectionManager(source=self.snapshot)

    def snapshot(self) -> Sequence[Identifiable]:
        """Current visible items."""
        return self._snapshot_provider(self.filter_text)

    def set_filter(self, text: Optional[str]) -> None:
        self.filter_text = text.strip() if text and text.strip() else None

    def rows(self) -> List[RowInfo]:
        return [
            RowInfo(item_id=item.id, label=self._label(item), checked=self.selection.is_selected(item.id))
            for item in self.snapshot()
        ]

    @property
    def batch_mode(self) -> bool:
        return self.selection.batch_mode

    def toggle_batch_mode(self) -> None:
        """Enter batch mode, or cancel it and drop the selection."""
        self.selection.toggle_batch_mode(reset_on_exit=True)

    def confirm_exit(self) -> None:
        """Leave batch mode keeping the selection."""
        if self.selection.batch_mode:
            self.selection.toggle_batch_mode(reset_on_exit=False)

    def toggle(self, item_id: str) -> None:
        self.selection.toggle(item_id)

    def select_all(self) -> bool:
        if not self.selection.batch_mode:
            return False
        self.selection.select_all()
        return True

    def invert(self) -> bool:
        if not self.selection.batch_mode:
            return False
        self.selection.invert_selection()
        return True

    def deselect_all(self) -> None:
        self.selection.deselect_all()

    def status_label(self) -> str:
        return f"{self.selection.selected_count} selected"

    def delete_selected(self) -> int:
        """
        Delete the selected items and leave batch mode.

        Returns:
            Number of items removed, 0 when not in batch mode or nothing selected
        """
        if not self.selection.batch_mode or not self.selection.selected_count:
            return 0
        ids = self.selection.selected_ids()
        removed = self._batch_delete(ids)
        logger.info("Deleted %d %s", removed, self.name)
        self.selection.toggle_batch_mode(reset_on_exit=True)
        return removed
