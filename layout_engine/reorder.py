"""
Layout Engine - Drag-Reorder Controller.

============================================================
PURPOSE
============================================================
Manages one drag gesture at a time and commits the new
order when the item is dropped.

STATE MACHINE:

        IDLE ──drag_start──► DRAGGING
          ▲                   │    ▲
          │              drag_over │ drag_over
          │                   ▼    │ (dead zone / self)
          │         DRAGGING_WITH_INDICATOR
          │                   │
          └──drag_end / drag_cancel (from either dragging state)

INVARIANTS:
- A committed reorder never duplicates or drops an item
- Pinned items never move and cannot be dragged or targeted
- Invalid targets are silent no-ops
- Only one drag session is active at a time

The controller knows nothing about rendering. The host
supplies a geometry provider (id -> BoundingBox) for the
hovered element and listens to DragEvents to apply the
"lifted" affordance and the drop indicator.

============================================================
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Generic, List, Optional, Sequence, Set, TypeVar

from .types import BoundingBox, DragState, DropIndicator, DropPosition


logger = logging.getLogger(__name__)

T = TypeVar("T")

GeometryProvider = Callable[[str], Optional[BoundingBox]]
PinnedPredicate = Callable[[str], bool]


# ============================================================
# STATE TRANSITION RULES
# ============================================================

VALID_TRANSITIONS: Dict[DragState, Set[DragState]] = {
    DragState.IDLE: {
        DragState.DRAGGING,
    },
    DragState.DRAGGING: {
        DragState.DRAGGING,
        DragState.DRAGGING_WITH_INDICATOR,
        DragState.IDLE,
    },
    DragState.DRAGGING_WITH_INDICATOR: {
        DragState.DRAGGING,
        DragState.DRAGGING_WITH_INDICATOR,
        DragState.IDLE,
    },
}


def can_transition(from_state: DragState, to_state: DragState) -> bool:
    return to_state in VALID_TRANSITIONS.get(from_state, set())


# ============================================================
# DRAG EVENTS
# ============================================================

class DragEventKind(Enum):
    """Kind of drag lifecycle event emitted to listeners."""

    START = "start"
    OVER = "over"
    END = "end"
    CANCEL = "cancel"


@dataclass
class DragEvent:
    """Event emitted on every accepted drag callback."""

    kind: DragEventKind
    """What happened."""

    active_id: str
    """Dragged item."""

    over_id: Optional[str] = None
    """Hovered item, if any."""

    indicator: Optional[DropIndicator] = None
    """Drop hint after this event."""

    committed: bool = False
    """Whether a drag_end changed the order."""

    timestamp: datetime = field(default_factory=datetime.utcnow)


# ============================================================
# PURE HELPERS
# ============================================================

def array_move(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """Remove the item at old_index and reinsert it at new_index."""
    moved = list(items)
    item = moved.pop(old_index)
    moved.insert(new_index, item)
    return moved


def compute_drop_indicator(
    over_id: str,
    pointer_x: float,
    box: BoundingBox,
    threshold_ratio: float = 0.4,
) -> Optional[DropIndicator]:
    """
    Decide which side of the hovered item the pointer is on.

    The outer threshold_ratio of the width on each side maps to
    BEFORE / AFTER; the middle band is a dead zone (None).
    """
    relative_x = pointer_x - box.left
    threshold = box.width * threshold_ratio

    if relative_x < threshold:
        return DropIndicator(over_id=over_id, position=DropPosition.BEFORE)
    if relative_x > box.width - threshold:
        return DropIndicator(over_id=over_id, position=DropPosition.AFTER)
    return None


def reorder(
    items: Sequence[T],
    active_id: Optional[str],
    over_id: Optional[str],
    key: Callable[[T], str],
    is_pinned: Optional[PinnedPredicate] = None,
) -> Optional[List[T]]:
    """
    Move active_id to the position of over_id.

    With a pinned predicate, only the movable subset is reordered
    and pinned items are re-spliced at the front.

    Returns:
        The new list, or None when the move is a no-op
    """
    if over_id is None or active_id is None or active_id == over_id:
        return None

    if is_pinned is None:
        ids = [key(item) for item in items]
        if active_id not in ids or over_id not in ids:
            return None
        return array_move(items, ids.index(active_id), ids.index(over_id))

    if is_pinned(active_id) or is_pinned(over_id):
        return None

    pinned = [item for item in items if is_pinned(key(item))]
    movable = [item for item in items if not is_pinned(key(item))]
    movable_ids = [key(item) for item in movable]

    if active_id not in movable_ids or over_id not in movable_ids:
        return None

    reordered = array_move(movable, movable_ids.index(active_id), movable_ids.index(over_id))
    return pinned + reordered


# ============================================================
# DRAG-REORDER CONTROLLER
# ============================================================

class DragReorderController(Generic[T]):
    """
    State machine for a drag-to-reorder list.

    Works for dashboard placements (key = placement id, recompute =
    layout calculator) and for table column ids (key = identity,
    pinned predicate for always-visible columns).
    """

    def __init__(
        self,
        items: Sequence[T],
        geometry: GeometryProvider,
        key: Callable[[T], str] = lambda item: getattr(item, "id"),
        recompute: Optional[Callable[[List[T]], List[T]]] = None,
        is_pinned: Optional[PinnedPredicate] = None,
        drop_threshold_ratio: float = 0.4,
        on_commit: Optional[Callable[[List[T]], None]] = None,
        items_provider: Optional[Callable[[], Sequence[T]]] = None,
    ):
        """
        Initialize controller.

        Args:
            items: Current ordered items
            geometry: Returns the bounding box of a rendered item
            key: Extracts the item id
            recompute: Applied to the list after every committed move
            is_pinned: Marks items that can never be dragged or targeted
            drop_threshold_ratio: Before / after band as a fraction of width
            on_commit: Host hook receiving each committed list
            items_provider: Owner's current list, re-read at drag start and drop
        """
        self._items: List[T] = list(items)
        self._geometry = geometry
        self._key = key
        self._recompute = recompute
        self._is_pinned = is_pinned
        self._threshold_ratio = drop_threshold_ratio
        self._on_commit = on_commit
        self._items_provider = items_provider

        self._state = DragState.IDLE
        self._active_id: Optional[str] = None
        self._lifted_id: Optional[str] = None
        self._indicator: Optional[DropIndicator] = None
        self._listeners: List[Callable[[DragEvent], None]] = []

    # ---------------------------------------------------------
    # PROPERTIES
    # ---------------------------------------------------------

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def items(self) -> List[T]:
        return list(self._items)

    @property
    def ids(self) -> List[str]:
        return [self._key(item) for item in self._items]

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def lifted_id(self) -> Optional[str]:
        """Item currently showing the lifted affordance."""
        return self._lifted_id

    @property
    def drop_indicator(self) -> Optional[DropIndicator]:
        return self._indicator

    @property
    def active_item(self) -> Optional[T]:
        """Item rendered in the drag preview."""
        for item in self._items:
            if self._key(item) == self._active_id:
                return item
        return None

    def draggable_ids(self) -> List[str]:
        """Ids that may start a drag."""
        return [i for i in self.ids if not self._pinned(i)]

    def add_listener(self, listener: Callable[[DragEvent], None]) -> None:
        """Add a drag event listener."""
        self._listeners.append(listener)

    def replace_items(self, items: Sequence[T]) -> None:
        """Swap in a new list (host-side change outside a gesture)."""
        self._items = list(items)

    # ---------------------------------------------------------
    # GESTURE CALLBACKS
    # ---------------------------------------------------------

    def drag_start(self, active_id: str) -> bool:
        """
        Lift an item.

        Returns:
            True if the drag session started
        """
        if self._state.is_dragging():
            return False
        self._sync()
        if active_id not in self.ids or self._pinned(active_id):
            return False

        self._state = DragState.DRAGGING
        self._active_id = active_id
        self._lifted_id = active_id
        self._indicator = None

        self._emit(DragEvent(kind=DragEventKind.START, active_id=active_id))
        return True

    def drag_over(
        self,
        active_id: str,
        over_id: Optional[str],
        pointer_x: float,
    ) -> Optional[DropIndicator]:
        """
        Update the drop indicator for the hovered item.

        Returns:
            The indicator now shown, or None
        """
        if not self._state.is_dragging():
            return None

        if over_id is None or over_id == active_id:
            self._set_indicator(None)
        else:
            box = self._geometry(over_id)
            if box is None:
                # Hovered element not rendered; keep the current hint
                return self._indicator
            self._set_indicator(
                compute_drop_indicator(over_id, pointer_x, box, self._threshold_ratio)
            )

        self._emit(DragEvent(
            kind=DragEventKind.OVER,
            active_id=active_id,
            over_id=over_id,
            indicator=self._indicator,
        ))
        return self._indicator

    def drag_end(self, active_id: str, over_id: Optional[str]) -> bool:
        """
        Drop the item and commit the new order.

        Returns:
            True if the order changed
        """
        if not self._state.is_dragging():
            return False

        self._reset_session()
        self._sync()

        moved = reorder(self._items, active_id, over_id, self._key, self._is_pinned)
        committed = moved is not None

        if committed:
            if self._recompute is not None:
                moved = self._recompute(moved)
            self._items = moved
            logger.debug(f"Drag committed: {active_id} -> {over_id}")

        self._emit(DragEvent(
            kind=DragEventKind.END,
            active_id=active_id,
            over_id=over_id,
            committed=committed,
        ))

        if committed and self._on_commit is not None:
            self._on_commit(list(self._items))

        return committed

    def drag_cancel(self) -> None:
        """Abort the gesture (escape key, pointer lost)."""
        if not self._state.is_dragging():
            return

        active_id = self._active_id
        self._reset_session()
        self._emit(DragEvent(kind=DragEventKind.CANCEL, active_id=active_id or ""))

    # ---------------------------------------------------------
    # INTERNALS
    # ---------------------------------------------------------

    def _pinned(self, item_id: str) -> bool:
        return self._is_pinned is not None and self._is_pinned(item_id)

    def _sync(self) -> None:
        if self._items_provider is not None:
            self.replace_items(self._items_provider())

    def _set_indicator(self, indicator: Optional[DropIndicator]) -> None:
        new_state = DragState.DRAGGING_WITH_INDICATOR if indicator else DragState.DRAGGING
        if not can_transition(self._state, new_state):
            return
        self._indicator = indicator
        self._state = new_state

    def _reset_session(self) -> None:
        self._state = DragState.IDLE
        self._active_id = None
        self._lifted_id = None
        self._indicator = None

    def _emit(self, event: DragEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Drag listener error: {e}")
