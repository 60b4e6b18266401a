"""
Layout Services for the Dashboard API.

The API is stateless: the browser owns its layout state and its
local storage, and sends the current state with each request.
"""
import json
from typing import Any, Dict, List, Optional, Union

from core.exceptions import LayoutValidationError
from layout_engine import (
    HOLDINGS_COLUMNS,
    HOLDINGS_COLUMNS_KEY,
    BoundingBox,
    ColumnDefinition,
    ColumnLayoutEngine,
    ColumnPreferenceStore,
    ColumnPreferences,
    InMemoryStorage,
    LayoutCalculator,
    LayoutEngineConfig,
    TableQuery,
    WidgetPlacement,
    WidgetRegistry,
    WidgetWidth,
    apply_query,
    compute_drop_indicator,
    group_rows,
    initial_placements,
    reorder,
)


class LayoutService:
    def __init__(self, registry: WidgetRegistry, config: LayoutEngineConfig):
        self.registry = registry
        self.config = config
        self.calculator = LayoutCalculator(config.layout)

    # =======================
    # 1. WIDGET LAYOUT
    # =======================
    def placements_from(self, items: List[Dict[str, Any]]) -> List[WidgetPlacement]:
        """Resolve client items against the registry. Raises on unknown ids / widths."""
        placements = []
        seen = set()
        for item in items:
            widget = self.registry.get(item["id"])
            if widget.id in seen:
                raise LayoutValidationError(
                    f"Duplicate widget in layout: {widget.id}", field="items", value=widget.id
                )
            seen.add(widget.id)
            placements.append(WidgetPlacement(
                id=widget.id,
                widget_ref=widget,
                width=WidgetWidth.parse(item.get("width", WidgetWidth.ONE_THIRD.value)),
            ))
        return placements

    def initial_layout(self, simple_mode: bool = False) -> List[WidgetPlacement]:
        placements = initial_placements(self.registry, self.calculator)
        if simple_mode:
            placements = self.calculator.calculate(
                p for p in placements if not p.widget_ref.hidden_in_simple_mode
            )
        return placements

    def calculate(self, items: List[Dict[str, Any]]) -> List[WidgetPlacement]:
        return self.calculator.calculate(self.placements_from(items))

    def move(self, items: List[Dict[str, Any]], active_id: str, over_id: Optional[str]):
        placements = self.placements_from(items)
        moved = reorder(placements, active_id, over_id, key=lambda p: p.id)
        if moved is None:
            return self.calculator.calculate(placements), False
        return self.calculator.calculate(moved), True

    def set_enabled(self, items: List[Dict[str, Any]], enabled_ids: List[str]) -> List[WidgetPlacement]:
        current = {p.id: p for p in self.placements_from(items)}
        new_items = []
        for widget_id in dict.fromkeys(enabled_ids):
            widget = self.registry.get(widget_id)
            existing = current.get(widget_id)
            width = existing.width if existing else WidgetWidth.ONE_THIRD
            new_items.append(WidgetPlacement(id=widget.id, widget_ref=widget, width=width))
        return self.calculator.calculate(new_items)

    def remove(self, items: List[Dict[str, Any]], widget_id: str):
        placements = self.placements_from(items)
        remaining = [p for p in placements if p.id != widget_id]
        return self.calculator.calculate(remaining), len(remaining) != len(placements)

    @staticmethod
    def layout_payload(placements: List[WidgetPlacement]) -> Dict[str, Any]:
        return {
            "placements": [p.to_dict() for p in placements],
            "rows": [[p.id for p in row] for row in group_rows(placements)],
        }

    # =======================
    # 2. DRAG
    # =======================
    def drop_indicator(
        self,
        active_id: str,
        over_id: Optional[str],
        pointer_x: float,
        box: Optional[Dict[str, float]],
    ):
        if over_id is None or over_id == active_id or box is None:
            return None
        return compute_drop_indicator(
            over_id,
            pointer_x,
            BoundingBox(left=box["left"], width=box["width"]),
            self.config.drag.drop_threshold_ratio,
        )


class ColumnService:
    def __init__(self, definitions: List[ColumnDefinition], key: str = HOLDINGS_COLUMNS_KEY):
        self.definitions = definitions
        self.key = key

    def engine_for(self, blob: Optional[Union[str, Dict[str, Any]]]) -> ColumnLayoutEngine:
        """
        Engine seeded with the client's stored value.

        Goes through the same load path as local storage, so a corrupt
        or stale blob falls back or merges exactly like it would there.
        """
        initial = {}
        if isinstance(blob, str):
            initial[self.key] = blob
        elif blob is not None:
            initial[self.key] = json.dumps(blob)

        store = ColumnPreferenceStore(InMemoryStorage(initial), self.key, self.definitions)
        return ColumnLayoutEngine(self.definitions, store=store)

    def load(self, blob):
        return self.engine_for(blob)

    def move(self, preferences: ColumnPreferences, active_id: str, over_id: Optional[str]):
        engine = self.engine_for(preferences.to_dict())
        changed = engine.move(active_id, over_id)
        return engine, changed

    def toggle(self, preferences: ColumnPreferences, column_id: str):
        engine = self.engine_for(preferences.to_dict())
        changed = engine.toggle_visibility(column_id)
        return engine, changed

    @staticmethod
    def layout_payload(engine: ColumnLayoutEngine) -> Dict[str, Any]:
        return {
            "definitions": [col.to_dict() for col in engine.definitions],
            "preferences": engine.preferences.to_dict(),
            "visible_columns": [col.id for col in engine.visible_columns()],
            "movable_columns": engine.movable_columns(),
        }


class HoldingsTableService:
    def query(self, rows: List[Dict[str, Any]], **params) -> List[Dict[str, Any]]:
        return apply_query(rows, TableQuery(**params))


def get_holdings_column_service() -> ColumnService:
    return ColumnService(HOLDINGS_COLUMNS)
