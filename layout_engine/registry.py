"""
Layout Engine - Widget Registry.

Read-only catalog of the widgets the home dashboard can show.
Catalog order is the default dashboard order.
"""

import logging
from typing import Dict, Iterable, List, Optional

from core.exceptions import LayoutValidationError, UnknownWidgetError
from .calculator import LayoutCalculator
from .types import WidgetCategory, WidgetDescriptor, WidgetPlacement, WidgetWidth


logger = logging.getLogger(__name__)


# =============================================================
# DEFAULT CATALOG
# =============================================================

DEFAULT_WIDGETS: List[WidgetDescriptor] = [
    WidgetDescriptor(
        id="commission",
        title="Commission",
        description="Monthly commission earnings and trends",
        category=WidgetCategory.PERFORMANCE,
        default_width=WidgetWidth.ONE_HALF,
    ),
    WidgetDescriptor(
        id="aum",
        title="Total AUM",
        description="Track total assets under management and historical trends",
        category=WidgetCategory.PERFORMANCE,
        default_width=WidgetWidth.ONE_HALF,
    ),
    WidgetDescriptor(
        id="activity",
        title="Activity",
        description="Summary of trades and deposits",
        category=WidgetCategory.TRADING,
    ),
    WidgetDescriptor(
        id="top10Holdings",
        title="Top 10 Holdings",
        description="Overview of top holdings by market value",
        category=WidgetCategory.PERFORMANCE,
    ),
    WidgetDescriptor(
        id="recently-viewed",
        title="Recently viewed client and accounts",
        description="Quick access to recently viewed clients and accounts",
        category=WidgetCategory.CLIENTS,
        hidden_in_simple_mode=True,
    ),
    WidgetDescriptor(
        id="market",
        title="Market",
        description="Key market indices and indicators",
        category=WidgetCategory.MARKET,
    ),
    WidgetDescriptor(
        id="clients",
        title="Clients",
        description="Client list, AUM, and key details",
        category=WidgetCategory.CLIENTS,
        default_width=WidgetWidth.ONE_HALF,
    ),
    WidgetDescriptor(
        id="compliance",
        title="Alerts",
        description="Actionable alerts and notifications",
        category=WidgetCategory.COMPLIANCE,
        default_width=WidgetWidth.ONE_HALF,
    ),
]


# =============================================================
# REGISTRY
# =============================================================

class WidgetRegistry:
    """Catalog of available widgets, in catalog order."""

    def __init__(self, widgets: Iterable[WidgetDescriptor]):
        self._widgets: List[WidgetDescriptor] = list(widgets)
        self._by_id: Dict[str, WidgetDescriptor] = {}

        for widget in self._widgets:
            if widget.id in self._by_id:
                raise LayoutValidationError(
                    f"Duplicate widget id in registry: {widget.id}",
                    field="id",
                    value=widget.id,
                )
            self._by_id[widget.id] = widget

    def __len__(self) -> int:
        return len(self._widgets)

    def __iter__(self):
        return iter(self._widgets)

    def contains(self, widget_id: str) -> bool:
        return widget_id in self._by_id

    def get(self, widget_id: str) -> WidgetDescriptor:
        widget = self._by_id.get(widget_id)
        if widget is None:
            raise UnknownWidgetError(widget_id)
        return widget

    def find(self, widget_id: str) -> Optional[WidgetDescriptor]:
        return self._by_id.get(widget_id)

    def all(self) -> List[WidgetDescriptor]:
        return list(self._widgets)

    def default_enabled(self) -> List[WidgetDescriptor]:
        return [w for w in self._widgets if w.default_enabled]


_default_registry: Optional[WidgetRegistry] = None


def get_default_registry() -> WidgetRegistry:
    """Shared registry built from DEFAULT_WIDGETS."""
    global _default_registry
    if _default_registry is None:
        _default_registry = WidgetRegistry(DEFAULT_WIDGETS)
    return _default_registry


def initial_placements(
    registry: WidgetRegistry,
    calculator: Optional[LayoutCalculator] = None,
) -> List[WidgetPlacement]:
    """Mount-time layout: default-enabled widgets at their default widths."""
    calculator = calculator or LayoutCalculator()

    widgets = registry.default_enabled()
    if not widgets:
        logger.warning(f"No default-enabled widgets found. Available widgets: {len(registry)}")

    return calculator.calculate(
        WidgetPlacement(id=w.id, widget_ref=w, width=w.default_width)
        for w in widgets
    )
