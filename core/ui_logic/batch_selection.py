"""
Batch selection state management for list views.

Track batch mode and the set of selected item IDs for any list of items
that carry a string ``id``. Works for subscriptions, profiles and manual
nodes alike. No UI framework dependencies.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Protocol, Sequence, Set, TypeVar, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Identifiable(Protocol):
    """Anything with a stable, unique string identifier."""
    id: str


T = TypeVar("T", bound=Identifiable)

# Callable returning the current (possibly filtered) list contents
SnapshotSource = Callable[[], Sequence[T]]


@dataclass
class SelectionEvent:
    """Represents a selection change event."""
    change: str  # "batch_mode", "toggle", "select_all", "deselect_all", "invert"
    batch_mode: bool
    selected_count: int
    item_ids: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"SelectionEvent(change={self.change}, batch_mode={self.batch_mode}, count={self.selected_count})"


# Type alias for selection event callbacks
SelectionCallback = Callable[[SelectionEvent], None]


class SelectionManager(Generic[T]):
    """
    Manages batch-mode selection over an externally owned list.

    The manager stores identifiers only, never item references, so stale IDs
    survive removal of their items. Bulk operations read the snapshot given
    at call time, or call ``source`` at call time when no snapshot is given.
    Snapshots are never cached between calls.

    ``selected_ids()`` returns IDs in ascending sorted order.
    """

    def __init__(self, source: Optional[SnapshotSource] = None) -> None:
        """
        Initialize selection manager.

        Args:
            source: Optional callable returning the live list snapshot, used by
                select_all/invert_selection when no snapshot is passed
        """
        self._source = source
        self._batch_mode = False
        self._selected: Set[str] = set()
        self._callbacks: List[SelectionCallback] = []

    @property
    def batch_mode(self) -> bool:
        """True while multi-select controls are active."""
        return self._batch_mode

    @property
    def selected_count(self) -> int:
        """Number of selected IDs."""
        return len(self._selected)

    def register_callback(self, callback: SelectionCallback) -> None:
        """
        Register callback for selection change events.

        Args:
            callback: Function to call when selection changes
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: SelectionCallback) -> None:
        """
        Unregister selection change callback.

        Args:
            callback: Function to remove from callbacks
        """
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def toggle_batch_mode(self, reset_on_exit: bool = True) -> None:
        """
        Enter or leave batch mode.

        Args:
            reset_on_exit: If True, clear the selection when leaving batch mode.
                Pass False to keep the selection (confirm-then-exit flow).
        """
        self._batch_mode = not self._batch_mode
        if not self._batch_mode and reset_on_exit:
            self._selected.clear()
        logger.debug("Batch mode %s", "entered" if self._batch_mode else "exited")
        self._notify("batch_mode", [])

    def is_selected(self, item_id: str) -> bool:
        """
        Check if an ID is currently selected.

        Args:
            item_id: ID to check, need not belong to any known item

        Returns:
            True if the ID is selected
        """
        return item_id in self._selected

    def toggle(self, item_id: str) -> None:
        """
        Flip the selection state of a single ID.

        Args:
            item_id: ID to toggle
        """
        if item_id in self._selected:
            self._selected.remove(item_id)
        else:
            self._selected.add(item_id)
        self._notify("toggle", [item_id])

    def select_all(self, snapshot: Optional[Sequence[T]] = None) -> None:
        """
        Add every item of the snapshot to the selection.

        Selected IDs outside the snapshot stay selected, so selecting all
        under a filter keeps choices made under a different filter.

        Args:
            snapshot: Items to select; read from source when omitted
        """
        ids = self._snapshot_ids(snapshot)
        added = [item_id for item_id in ids if item_id not in self._selected]
        self._selected.update(added)
        if added:
            self._notify("select_all", added)

    def deselect_all(self) -> None:
        """Clear the selection."""
        if not self._selected:
            return
        cleared = sorted(self._selected)
        self._selected.clear()
        self._notify("deselect_all", cleared)

    def invert_selection(self, snapshot: Optional[Sequence[T]] = None) -> None:
        """
        Flip the selection state of every item in the snapshot.

        Only IDs present in the snapshot change. Selected IDs of items that
        are not in the snapshot are neither flipped nor dropped.

        Args:
            snapshot: Items to invert; read from source when omitted
        """
        ids = self._snapshot_ids(snapshot)
        for item_id in ids:
            if item_id in self._selected:
                self._selected.remove(item_id)
            else:
                self._selected.add(item_id)
        if ids:
            self._notify("invert", ids)

    def selected_ids(self) -> List[str]:
        """
        Get all selected IDs.

        Returns:
            New list of selected IDs, sorted ascending
        """
        return sorted(self._selected)

    def get_state_summary(self) -> dict[str, str | int | bool | list]:
        """
        Get summary of current selection state for debugging.

        Returns:
            Dictionary with selection state information
        """
        return {
            'batch_mode': self._batch_mode,
            'selected_count': len(self._selected),
            'selected_ids': self.selected_ids(),
            'callback_count': len(self._callbacks)
        }

    def _snapshot_ids(self, snapshot: Optional[Sequence[T]]) -> List[str]:
        if snapshot is None:
            snapshot = self._source() if self._source is not None else ()
        # Duplicate IDs in a snapshot count once
        return list(dict.fromkeys(item.id for item in snapshot))

    def _notify(self, change: str, item_ids: List[str]) -> None:
        event = SelectionEvent(
            change=change,
            batch_mode=self._batch_mode,
            selected_count=len(self._selected),
            item_ids=item_ids
        )
        logger.debug("%s", event)

        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                # Log error but don't let callback failures break selection
                logger.error("Selection callback error: %s", e)

    def __repr__(self) -> str:
        return f"SelectionManager(batch_mode={self._batch_mode}, selected={len(self._selected)})"
