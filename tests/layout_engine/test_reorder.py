"""
Tests for the Drag-Reorder Controller.

Tests cover:
- array_move and reorder helpers
- Drop indicator thresholds
- State transitions
- Pinned items
- Listener notifications
"""

import itertools
from collections import Counter
from unittest.mock import MagicMock

import pytest

from layout_engine import (
    BoundingBox,
    DragEventKind,
    DragReorderController,
    DragState,
    DropPosition,
    WidgetPlacement,
    WidgetWidth,
    array_move,
    calculate_layout,
    compute_drop_indicator,
    reorder,
)
from layout_engine.reorder import can_transition


BOX = BoundingBox(left=100.0, width=200.0)


def identity(item):
    return item


@pytest.fixture
def geometry():
    """Every rendered item is 200px wide starting at x=100."""
    return lambda item_id: BOX


@pytest.fixture
def controller(geometry):
    return DragReorderController(["a", "b", "c", "d"], geometry, key=identity)


# =============================================================
# TEST: Helpers
# =============================================================

class TestArrayMove:
    """array_move semantics."""

    def test_move_forward(self):
        assert array_move(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]

    def test_move_backward(self):
        assert array_move(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_input_untouched(self):
        items = ["a", "b", "c"]
        array_move(items, 0, 2)
        assert items == ["a", "b", "c"]


class TestReorder:
    """reorder helper."""

    def test_move_to_target_position(self):
        assert reorder(["a", "b", "c"], "a", "c", key=identity) == ["b", "c", "a"]

    @pytest.mark.parametrize("over_id", [None, "a", "zzz"])
    def test_noop_targets(self, over_id):
        """Nothing, self or unknown target: no change."""
        assert reorder(["a", "b", "c"], "a", over_id, key=identity) is None

    def test_unknown_active(self):
        assert reorder(["a", "b"], "zzz", "a", key=identity) is None

    def test_every_move_preserves_ids(self):
        """Any (active, over) pair keeps the multiset of ids."""
        items = ["a", "b", "c", "d", "e"]
        for active_id, over_id in itertools.product(items, repeat=2):
            moved = reorder(items, active_id, over_id, key=identity)
            if moved is None:
                assert active_id == over_id
                continue
            assert Counter(moved) == Counter(items)
            assert moved.index(active_id) == items.index(over_id)

    def test_pinned_items_stay_in_front(self):
        pinned = {"p1", "p2"}.__contains__
        items = ["p1", "p2", "a", "b", "c"]
        assert reorder(items, "c", "a", key=identity, is_pinned=pinned) == ["p1", "p2", "c", "a", "b"]

    def test_pinned_respliced_when_out_of_place(self):
        """Pinned items come first after a move even if the input had them elsewhere."""
        pinned = {"p"}.__contains__
        assert reorder(["a", "p", "b"], "b", "a", key=identity, is_pinned=pinned) == ["p", "b", "a"]

    @pytest.mark.parametrize("active_id,over_id", [("a", "p"), ("p", "a")])
    def test_pinned_rejected(self, active_id, over_id):
        pinned = {"p"}.__contains__
        assert reorder(["p", "a", "b"], active_id, over_id, key=identity, is_pinned=pinned) is None


# =============================================================
# TEST: Drop indicator
# =============================================================

class TestDropIndicator:
    """Pointer position relative to the hovered box."""

    @pytest.mark.parametrize("pointer_x,expected", [
        (100.0, DropPosition.BEFORE),
        (179.0, DropPosition.BEFORE),
        (180.0, None),
        (200.0, None),
        (220.0, None),
        (221.0, DropPosition.AFTER),
        (300.0, DropPosition.AFTER),
    ])
    def test_threshold_bands(self, pointer_x, expected):
        """Outer 40% on each side, dead zone in the middle."""
        indicator = compute_drop_indicator("b", pointer_x, BOX)
        if expected is None:
            assert indicator is None
        else:
            assert indicator.over_id == "b"
            assert indicator.position == expected

    def test_custom_ratio(self):
        """A 0.5 ratio leaves only the exact center without a hint."""
        assert compute_drop_indicator("b", 201.0, BOX, 0.5).position == DropPosition.AFTER
        assert compute_drop_indicator("b", 199.0, BOX, 0.5).position == DropPosition.BEFORE
        assert compute_drop_indicator("b", 200.0, BOX, 0.5) is None

    def test_to_dict(self):
        indicator = compute_drop_indicator("b", 100.0, BOX)
        assert indicator.to_dict() == {"over_id": "b", "position": "before"}


# =============================================================
# TEST: State machine
# =============================================================

class TestStateTransitions:
    """Valid drag state transitions."""

    def test_idle_only_starts_dragging(self):
        assert can_transition(DragState.IDLE, DragState.DRAGGING)
        assert not can_transition(DragState.IDLE, DragState.DRAGGING_WITH_INDICATOR)

    def test_dragging_can_end(self):
        assert can_transition(DragState.DRAGGING, DragState.IDLE)
        assert can_transition(DragState.DRAGGING_WITH_INDICATOR, DragState.IDLE)


class TestDragReorderController:
    """Gesture lifecycle."""

    def test_starts_idle(self, controller):
        assert controller.state == DragState.IDLE
        assert controller.active_id is None
        assert controller.drop_indicator is None

    def test_drag_start_lifts_item(self, controller):
        assert controller.drag_start("b") is True
        assert controller.state == DragState.DRAGGING
        assert controller.active_id == "b"
        assert controller.lifted_id == "b"
        assert controller.active_item == "b"

    def test_second_drag_start_rejected(self, controller):
        """One session at a time."""
        controller.drag_start("b")
        assert controller.drag_start("c") is False
        assert controller.active_id == "b"
        assert controller.lifted_id == "b"

    def test_second_drag_start_rejected_with_indicator(self, controller):
        controller.drag_start("b")
        controller.drag_over("b", "c", 290.0)
        assert controller.drag_start("c") is False
        assert controller.state == DragState.DRAGGING_WITH_INDICATOR

    def test_drag_start_unknown_rejected(self, controller):
        assert controller.drag_start("zzz") is False
        assert controller.state == DragState.IDLE

    def test_drag_over_sets_indicator(self, controller):
        controller.drag_start("a")
        indicator = controller.drag_over("a", "c", 290.0)
        assert indicator.position == DropPosition.AFTER
        assert controller.state == DragState.DRAGGING_WITH_INDICATOR

    def test_drag_over_dead_zone_clears_indicator(self, controller):
        controller.drag_start("a")
        controller.drag_over("a", "c", 110.0)
        assert controller.drag_over("a", "c", 200.0) is None
        assert controller.state == DragState.DRAGGING

    def test_drag_over_self_clears_indicator(self, controller):
        controller.drag_start("a")
        controller.drag_over("a", "c", 110.0)
        assert controller.drag_over("a", "a", 110.0) is None
        assert controller.state == DragState.DRAGGING

    def test_drag_over_unrendered_keeps_indicator(self):
        """Missing geometry keeps the current hint."""
        boxes = {"c": BOX}
        controller = DragReorderController(["a", "b", "c"], boxes.get, key=identity)
        controller.drag_start("a")
        first = controller.drag_over("a", "c", 110.0)
        assert controller.drag_over("a", "b", 110.0) == first

    def test_drag_over_while_idle_ignored(self, controller):
        assert controller.drag_over("a", "c", 110.0) is None
        assert controller.state == DragState.IDLE

    def test_drag_end_commits(self, controller):
        controller.drag_start("a")
        controller.drag_over("a", "c", 290.0)
        assert controller.drag_end("a", "c") is True
        assert controller.items == ["b", "c", "a", "d"]
        assert controller.state == DragState.IDLE
        assert controller.lifted_id is None
        assert controller.drop_indicator is None

    @pytest.mark.parametrize("over_id", [None, "a", "zzz"])
    def test_drag_end_invalid_target_is_noop(self, controller, over_id):
        controller.drag_start("a")
        assert controller.drag_end("a", over_id) is False
        assert controller.items == ["a", "b", "c", "d"]
        assert controller.state == DragState.IDLE

    def test_drag_end_while_idle_ignored(self, controller):
        assert controller.drag_end("a", "c") is False
        assert controller.items == ["a", "b", "c", "d"]

    def test_drag_cancel(self, controller):
        controller.drag_start("a")
        controller.drag_over("a", "c", 290.0)
        controller.drag_cancel()
        assert controller.state == DragState.IDLE
        assert controller.items == ["a", "b", "c", "d"]

    def test_recompute_applied_on_commit(self, geometry):
        """Dashboard placements get rows recomputed after a move."""
        items = calculate_layout([
            WidgetPlacement(id="a", width=WidgetWidth.FULL),
            WidgetPlacement(id="b", width=WidgetWidth.ONE_THIRD),
            WidgetPlacement(id="c", width=WidgetWidth.ONE_THIRD),
        ])
        controller = DragReorderController(items, geometry, recompute=calculate_layout)
        controller.drag_start("a")
        controller.drag_end("a", "c")
        assert controller.ids == ["b", "c", "a"]
        assert [p.row for p in controller.items] == [0, 0, 1]

    def test_on_commit_receives_new_order(self, geometry):
        on_commit = MagicMock()
        controller = DragReorderController(["a", "b"], geometry, key=identity, on_commit=on_commit)
        controller.drag_start("b")
        controller.drag_end("b", "a")
        on_commit.assert_called_once_with(["b", "a"])

    def test_on_commit_not_called_for_noop(self, geometry):
        on_commit = MagicMock()
        controller = DragReorderController(["a", "b"], geometry, key=identity, on_commit=on_commit)
        controller.drag_start("b")
        controller.drag_end("b", None)
        on_commit.assert_not_called()

    def test_items_provider_read_at_drag_start(self, geometry):
        """Changes made by the owner after construction are not overwritten."""
        owner = {"items": ["a", "b", "c"]}
        controller = DragReorderController(
            owner["items"], geometry, key=identity, items_provider=lambda: owner["items"]
        )
        owner["items"] = ["a", "c"]

        assert controller.drag_start("b") is False
        assert controller.drag_start("c") is True
        assert controller.drag_end("c", "a") is True
        assert controller.items == ["c", "a"]


class TestPinnedDrag:
    """Pinned items in the controller."""

    @pytest.fixture
    def pinned_controller(self, geometry):
        return DragReorderController(
            ["p", "a", "b"], geometry, key=identity, is_pinned={"p"}.__contains__
        )

    def test_pinned_not_draggable(self, pinned_controller):
        assert pinned_controller.draggable_ids() == ["a", "b"]
        assert pinned_controller.drag_start("p") is False

    def test_drop_on_pinned_rejected(self, pinned_controller):
        pinned_controller.drag_start("b")
        assert pinned_controller.drag_end("b", "p") is False
        assert pinned_controller.items == ["p", "a", "b"]


class TestDragListeners:
    """Listener notifications."""

    def test_events_in_order(self, controller):
        listener = MagicMock()
        controller.add_listener(listener)

        controller.drag_start("a")
        controller.drag_over("a", "c", 290.0)
        controller.drag_end("a", "c")

        kinds = [c.args[0].kind for c in listener.call_args_list]
        assert kinds == [DragEventKind.START, DragEventKind.OVER, DragEventKind.END]
        assert listener.call_args_list[-1].args[0].committed is True

    def test_cancel_event(self, controller):
        listener = MagicMock()
        controller.add_listener(listener)
        controller.drag_start("a")
        controller.drag_cancel()
        assert listener.call_args.args[0].kind == DragEventKind.CANCEL
        assert listener.call_args.args[0].active_id == "a"

    def test_listener_error_does_not_break_gesture(self, controller):
        """Listener exceptions are logged, the drag goes on."""
        controller.add_listener(MagicMock(side_effect=RuntimeError("boom")))
        assert controller.drag_start("a") is True
        assert controller.drag_end("a", "b") is True
        assert controller.items == ["b", "a", "c", "d"]
