"""
Layout Engine - Layout Calculator.

============================================================
PURPOSE
============================================================
Assigns each dashboard widget a grid row.

ALGORITHM (greedy, array order):
    current_row = 0, current_sum = 0
    for each item:
        if current_sum > 0 and current_sum + units > capacity:
            current_row += 1; current_sum = 0
        item.row = current_row
        current_sum += units

INVARIANTS:
- Order is preserved, no item is dropped or split
- Rows are contiguous from 0 and non-decreasing
- A row never holds more than capacity units, except a
  single item wider than capacity on its own row
- Recomputing a computed layout yields the same rows

============================================================
"""

import dataclasses
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_ROW_CAPACITY, DEFAULT_WIDTH_UNITS, LayoutConfig
from .types import WidgetPlacement, WidgetWidth


def calculate_layout(
    items: Iterable[WidgetPlacement],
    width_units: Optional[Dict[WidgetWidth, float]] = None,
    row_capacity: float = DEFAULT_ROW_CAPACITY,
) -> List[WidgetPlacement]:
    """
    Recompute rows for an ordered sequence of placements.

    Args:
        items: Placements in display order
        width_units: Units consumed per width
        row_capacity: Units available per row

    Returns:
        New placements, same order, with row assigned
    """
    units_table = width_units or DEFAULT_WIDTH_UNITS

    layout: List[WidgetPlacement] = []
    current_row = 0
    current_sum = 0.0

    for item in items:
        item_units = units_table[item.width]

        if current_sum > 0 and current_sum + item_units > row_capacity:
            current_row += 1
            current_sum = 0.0

        layout.append(dataclasses.replace(item, row=current_row))
        current_sum += item_units

    return layout


def group_rows(placements: Iterable[WidgetPlacement]) -> List[List[WidgetPlacement]]:
    """Group a computed layout into one list per grid row, in row order."""
    rows: Dict[int, List[WidgetPlacement]] = {}
    for placement in placements:
        rows.setdefault(placement.row, []).append(placement)
    return [rows[row] for row in sorted(rows)]


class LayoutCalculator:
    """
    Layout calculator bound to a packing configuration.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config or LayoutConfig()
        self._config.validate()

    @property
    def row_capacity(self) -> float:
        return self._config.row_capacity

    def units_for(self, width: WidgetWidth) -> float:
        return self._config.width_units[width]

    def calculate(self, items: Iterable[WidgetPlacement]) -> List[WidgetPlacement]:
        return calculate_layout(
            items,
            width_units=self._config.width_units,
            row_capacity=self._config.row_capacity,
        )

    def row_usage(self, placements: Iterable[WidgetPlacement]) -> Dict[int, float]:
        """Units consumed per row of a computed layout."""
        usage: Dict[int, float] = {}
        for placement in placements:
            usage[placement.row] = usage.get(placement.row, 0.0) + self.units_for(placement.width)
        return usage
