"""
Layout Engine - Column Layout Engine.

============================================================
PURPOSE
============================================================
Drag-reorder and show/hide for table columns, with the
preferences written back to local storage on every change.

PINNED COLUMNS:
- always_visible columns lead the order
- they are never hidden, dragged or used as a drop target

============================================================
"""

from typing import Dict, List, Optional

from .persistence import ColumnPreferenceStore
from .reorder import DragReorderController, GeometryProvider, reorder
from .types import ColumnDefinition, ColumnPreferences


# =============================================================
# HOLDINGS TABLE COLUMNS
# =============================================================

HOLDINGS_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition(id="actions", label="Actions", sort_key=None, always_visible=True),
    ColumnDefinition(id="symbol", label="Symbol/CUSIP", sort_key="symbol", always_visible=True),
    ColumnDefinition(id="assetClass", label="Asset class", sort_key="assetClass"),
    ColumnDefinition(id="quantity", label="Quantity", sort_key="quantity"),
    ColumnDefinition(id="marketValue", label="Market Value", sort_key="marketValue"),
    ColumnDefinition(id="description", label="Description", sort_key="description"),
    ColumnDefinition(id="unrealizedGL", label="Unrealized G/L", sort_key="unrealizedGL"),
    ColumnDefinition(id="unrealizedGLPercent", label="Unrealized G/L %", sort_key="unrealizedGLPercent"),
    ColumnDefinition(id="currentPrice", label="Current Price", sort_key="currentPrice"),
    ColumnDefinition(id="avgPrice", label="Avg Price", sort_key="avgPrice"),
]

HOLDINGS_COLUMNS_KEY = "holdings-table-columns"


# =============================================================
# COLUMN LAYOUT ENGINE
# =============================================================

class ColumnLayoutEngine:
    """
    Column order and visibility for one table.

    Without a store the engine keeps preferences in memory only.
    """

    def __init__(
        self,
        definitions: List[ColumnDefinition],
        store: Optional[ColumnPreferenceStore] = None,
    ):
        self._definitions = list(definitions)
        self._by_id: Dict[str, ColumnDefinition] = {col.id: col for col in self._definitions}
        self._store = store

        if store is not None:
            prefs = store.load()
        else:
            prefs = ColumnPreferences.defaults_for(self._definitions)

        self._order: List[str] = prefs.order
        self._visibility: Dict[str, bool] = prefs.visibility

    # ---------------------------------------------------------
    # QUERIES
    # ---------------------------------------------------------

    @property
    def definitions(self) -> List[ColumnDefinition]:
        return list(self._definitions)

    @property
    def order(self) -> List[str]:
        return list(self._order)

    @property
    def visibility(self) -> Dict[str, bool]:
        return dict(self._visibility)

    @property
    def preferences(self) -> ColumnPreferences:
        return ColumnPreferences(order=self.order, visibility=self.visibility)

    def is_pinned(self, column_id: str) -> bool:
        col = self._by_id.get(column_id)
        return col is not None and col.always_visible

    def is_visible(self, column_id: str) -> bool:
        if self.is_pinned(column_id):
            return True
        col = self._by_id.get(column_id)
        default = col.default_visible if col else False
        return self._visibility.get(column_id, default)

    def visible_columns(self) -> List[ColumnDefinition]:
        """Columns to render, in display order."""
        return [
            self._by_id[column_id]
            for column_id in self._order
            if column_id in self._by_id and self.is_visible(column_id)
        ]

    def movable_columns(self) -> List[str]:
        """The draggable subset of the order."""
        return [column_id for column_id in self._order if not self.is_pinned(column_id)]

    # ---------------------------------------------------------
    # MUTATIONS
    # ---------------------------------------------------------

    def toggle_visibility(self, column_id: str) -> bool:
        """
        Show or hide a column.

        Returns:
            False if the toggle was refused (pinned or unknown column)
        """
        if column_id not in self._by_id or self.is_pinned(column_id):
            return False

        self._visibility[column_id] = not self.is_visible(column_id)
        self._persist()
        return True

    def move(self, active_id: str, over_id: Optional[str]) -> bool:
        """
        Move a column to the position of another.

        Returns:
            True if the order changed
        """
        moved = reorder(self._order, active_id, over_id, key=lambda i: i, is_pinned=self.is_pinned)
        if moved is None:
            return False

        self._order = moved
        self._persist()
        return True

    def reset(self) -> None:
        """Back to definition order and default visibility."""
        defaults = ColumnPreferences.defaults_for(self._definitions)
        self._order = defaults.order
        self._visibility = defaults.visibility
        self._persist()

    def drag_controller(
        self,
        geometry: GeometryProvider,
        drop_threshold_ratio: float = 0.4,
    ) -> DragReorderController[str]:
        """Controller for one drag gesture in the customize-columns list."""
        return DragReorderController(
            self._order,
            geometry,
            key=lambda i: i,
            is_pinned=self.is_pinned,
            drop_threshold_ratio=drop_threshold_ratio,
            on_commit=self._apply_order,
            items_provider=lambda: self._order,
        )

    # ---------------------------------------------------------
    # INTERNALS
    # ---------------------------------------------------------

    def _apply_order(self, order: List[str]) -> None:
        self._order = list(order)
        self._persist()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.persist(self._order, self._visibility)
