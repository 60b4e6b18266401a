"""
Layout Engine - Types.

============================================================
PURPOSE
============================================================
All type definitions for the dashboard widget layout and
the holdings table column layout.

CRITICAL PRINCIPLE:
    "Rows are derived, never authored."
    Placement rows are always recomputed from order + widths.

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from core.exceptions import LayoutValidationError


# ============================================================
# WIDGET WIDTHS
# ============================================================

class WidgetWidth(Enum):
    """Fractional row width of a dashboard widget."""

    ONE_THIRD = "1/3"
    """One third of a row (1 unit)."""

    ONE_HALF = "1/2"
    """Half of a row (1.5 units)."""

    FULL = "1/1"
    """Full row (3 units)."""

    @classmethod
    def parse(cls, value: Any) -> "WidgetWidth":
        """
        Parse a width from the enum itself, its name or its wire value.

        Raises:
            LayoutValidationError: If the value is not a known width
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for width in cls:
                if value == width.value or value.upper() == width.name:
                    return width
        raise LayoutValidationError(
            f"Invalid widget width: {value!r}",
            field="width",
            value=value,
        )


class WidgetCategory(Enum):
    """Catalog grouping shown in the widget customizer."""

    PERFORMANCE = "performance"
    CLIENTS = "clients"
    TRADING = "trading"
    MARKET = "market"
    COMPLIANCE = "compliance"


# ============================================================
# DRAG TYPES
# ============================================================

class DropPosition(Enum):
    """Side of the hovered item where the dragged item would land."""

    BEFORE = "before"
    AFTER = "after"


class DragState(Enum):
    """State of the single active drag session."""

    IDLE = "IDLE"
    """No drag in progress."""

    DRAGGING = "DRAGGING"
    """An item is lifted, no drop hint shown."""

    DRAGGING_WITH_INDICATOR = "DRAGGING_WITH_INDICATOR"
    """An item is lifted and a drop hint is shown."""

    def is_dragging(self) -> bool:
        return self is not DragState.IDLE


@dataclass
class DropIndicator:
    """Transient hint showing where the dragged item would land."""

    over_id: str
    position: DropPosition

    def to_dict(self) -> dict:
        return {"over_id": self.over_id, "position": self.position.value}


@dataclass
class BoundingBox:
    """Horizontal extent of a rendered item, supplied by the host."""

    left: float
    width: float


# ============================================================
# WIDGETS
# ============================================================

@dataclass
class WidgetDescriptor:
    """
    Registry entry for a dashboard widget.

    The component reference is opaque: the layout engine never
    inspects it, it only hands it back to the host's render tree.
    """

    id: str
    title: str
    description: str = ""
    category: WidgetCategory = WidgetCategory.PERFORMANCE
    component: Any = None
    default_enabled: bool = True
    default_width: WidgetWidth = WidgetWidth.ONE_THIRD
    hidden_in_simple_mode: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "default_enabled": self.default_enabled,
            "default_width": self.default_width.value,
            "hidden_in_simple_mode": self.hidden_in_simple_mode,
        }


@dataclass
class WidgetPlacement:
    """
    Position of one widget on the dashboard grid.

    row is recomputed by the layout calculator after every change.
    """

    id: str
    widget_ref: Any = None
    width: WidgetWidth = WidgetWidth.ONE_THIRD
    row: int = 0

    @property
    def title(self) -> Optional[str]:
        """Title used for the drag preview, when the widget has one."""
        return getattr(self.widget_ref, "title", None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "width": self.width.value,
            "row": self.row,
        }


# ============================================================
# TABLE COLUMNS
# ============================================================

@dataclass
class ColumnDefinition:
    """Table column known to the column layout engine."""

    id: str
    label: str
    sort_key: Optional[str] = None
    default_visible: bool = True
    always_visible: bool = False
    """Pinned: never hidden, never reordered."""

    @property
    def sortable(self) -> bool:
        return self.sort_key is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "sort_key": self.sort_key,
            "default_visible": self.default_visible,
            "always_visible": self.always_visible,
        }


@dataclass
class ColumnPreferences:
    """
    Persisted column order and visibility.

    Serialized as {"order": [...], "visibility": {...}}.
    """

    order: List[str] = field(default_factory=list)
    visibility: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "order": list(self.order),
            "visibility": dict(self.visibility),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ColumnPreferences":
        """
        Build preferences from a decoded JSON blob.

        Raises:
            LayoutValidationError: If the blob does not have the expected shape
        """
        if not isinstance(data, dict):
            raise LayoutValidationError("Column preferences must be an object", value=data)

        order = data.get("order")
        visibility = data.get("visibility")

        if not isinstance(order, list) or not all(isinstance(i, str) for i in order):
            raise LayoutValidationError("order must be a list of column ids", field="order", value=order)
        if len(set(order)) != len(order):
            raise LayoutValidationError("order contains duplicate column ids", field="order", value=order)
        if not isinstance(visibility, dict) or not all(
            isinstance(k, str) and isinstance(v, bool) for k, v in visibility.items()
        ):
            raise LayoutValidationError(
                "visibility must map column ids to booleans",
                field="visibility",
                value=visibility,
            )

        return cls(order=list(order), visibility=dict(visibility))

    @classmethod
    def defaults_for(cls, definitions: List[ColumnDefinition]) -> "ColumnPreferences":
        """Definition order, each column's default visibility."""
        return cls(
            order=[col.id for col in definitions],
            visibility={col.id: col.default_visible for col in definitions},
        )
