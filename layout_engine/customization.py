"""
Layout Engine - Widget Customization Store.

Holds the home dashboard's working widget list: which widgets
are enabled, in what order, at what width. Every mutation
recomputes rows and, when a preference store is attached,
writes order and widths through.
"""

import logging
from typing import Callable, Iterable, List, Optional

from .calculator import LayoutCalculator
from .persistence import WidgetPreferenceStore
from .registry import WidgetRegistry, initial_placements
from .reorder import DragReorderController, GeometryProvider, reorder
from .types import WidgetDescriptor, WidgetPlacement, WidgetWidth


logger = logging.getLogger(__name__)


class WidgetCustomizationStore:
    """
    Dashboard widget layout state.

    on_change is the host's "widgets changed" hook and receives the
    recomputed placements after each mutation.
    """

    def __init__(
        self,
        registry: WidgetRegistry,
        calculator: Optional[LayoutCalculator] = None,
        store: Optional[WidgetPreferenceStore] = None,
        on_change: Optional[Callable[[List[WidgetPlacement]], None]] = None,
    ):
        self._registry = registry
        self._calculator = calculator or LayoutCalculator()
        self._store = store
        self._on_change = on_change

        restored = self._restore()
        if restored is None:
            restored = initial_placements(registry, self._calculator)
        self._placements = restored

    # ---------------------------------------------------------
    # QUERIES
    # ---------------------------------------------------------

    @property
    def placements(self) -> List[WidgetPlacement]:
        return list(self._placements)

    @property
    def enabled_ids(self) -> List[str]:
        return [p.id for p in self._placements]

    def is_enabled(self, widget_id: str) -> bool:
        return widget_id in self.enabled_ids

    def available_to_add(self) -> List[WidgetDescriptor]:
        """Registry widgets not on the dashboard, in catalog order."""
        enabled = set(self.enabled_ids)
        return [w for w in self._registry.all() if w.id not in enabled]

    def visible_layout(self, simple_mode: bool = False) -> List[WidgetPlacement]:
        """
        Layout as rendered.

        Simple mode hides widgets flagged hidden_in_simple_mode and
        packs the remaining ones again.
        """
        items = self._placements
        if simple_mode:
            items = [p for p in items if not self._hidden_in_simple_mode(p.id)]
        return self._calculator.calculate(items)

    # ---------------------------------------------------------
    # MUTATIONS
    # ---------------------------------------------------------

    def set_enabled_widgets(self, widgets: Iterable[WidgetDescriptor]) -> List[WidgetPlacement]:
        """
        Replace the working list, keeping the width of retained widgets.

        New widgets start at one third width.
        """
        current = {p.id: p for p in self._placements}
        items = []
        for widget in widgets:
            existing = current.get(widget.id)
            width = existing.width if existing else WidgetWidth.ONE_THIRD
            items.append(WidgetPlacement(id=widget.id, widget_ref=widget, width=width))
        return self._commit(items)

    def add_widget(self, widget_id: str) -> List[WidgetPlacement]:
        """Append a registry widget. Already enabled widgets are left alone."""
        widget = self._registry.get(widget_id)
        if self.is_enabled(widget_id):
            return self.placements
        widgets = [p.widget_ref for p in self._placements] + [widget]
        return self.set_enabled_widgets(widgets)

    def remove_widget(self, widget_id: str) -> List[WidgetPlacement]:
        """Drop a widget from the dashboard. Unknown ids are ignored."""
        if not self.is_enabled(widget_id):
            return self.placements
        return self._commit([p for p in self._placements if p.id != widget_id])

    def set_width(self, widget_id: str, width: WidgetWidth) -> List[WidgetPlacement]:
        if not self.is_enabled(widget_id):
            return self.placements
        return self._commit([
            WidgetPlacement(id=p.id, widget_ref=p.widget_ref, width=width)
            if p.id == widget_id else p
            for p in self._placements
        ])

    def move(self, active_id: str, over_id: Optional[str]) -> List[WidgetPlacement]:
        """Commit a drag-end reorder. Invalid targets leave the order as is."""
        moved = reorder(self._placements, active_id, over_id, key=lambda p: p.id)
        if moved is None:
            return self.placements
        return self._commit(moved)

    def drag_controller(
        self,
        geometry: GeometryProvider,
        drop_threshold_ratio: float = 0.4,
    ) -> DragReorderController[WidgetPlacement]:
        """Controller for one drag gesture, committing back into this store."""
        return DragReorderController(
            self._placements,
            geometry,
            key=lambda p: p.id,
            recompute=self._calculator.calculate,
            drop_threshold_ratio=drop_threshold_ratio,
            on_commit=self._commit,
            items_provider=lambda: self._placements,
        )

    # ---------------------------------------------------------
    # INTERNALS
    # ---------------------------------------------------------

    def _hidden_in_simple_mode(self, widget_id: str) -> bool:
        widget = self._registry.find(widget_id)
        return widget is not None and widget.hidden_in_simple_mode

    def _commit(self, items: List[WidgetPlacement]) -> List[WidgetPlacement]:
        self._placements = self._calculator.calculate(items)

        if self._store is not None:
            self._store.persist(
                [p.id for p in self._placements],
                {p.id: p.width for p in self._placements},
            )
        if self._on_change is not None:
            self._on_change(self.placements)

        return self.placements

    def _restore(self) -> Optional[List[WidgetPlacement]]:
        if self._store is None:
            return None

        stored = self._store.load()
        if stored is None:
            return None

        items = []
        for widget_id in stored["order"]:
            widget = self._registry.find(widget_id)
            if widget is None:
                continue
            width = stored["widths"].get(widget_id, widget.default_width)
            items.append(WidgetPlacement(id=widget_id, widget_ref=widget, width=width))

        logger.debug(f"Restored {len(items)} dashboard widgets from {self._store.key}")
        return self._calculator.calculate(items)
