"""
Layout Engine Package.

Dashboard widget layout and table column layout for the
wealth dashboard.

Modules:
- types: Placements, column definitions, preferences
- config: Packing, drag and storage configuration
- calculator: Greedy row packing
- reorder: Drag-reorder state machine
- registry: Widget catalog
- customization: Dashboard widget customization store
- persistence: Local preference storage
- columns: Table column layout engine
- table_view: Table sort / search / filter pipeline
"""

from .types import (
    WidgetWidth,
    WidgetCategory,
    DropPosition,
    DragState,
    DropIndicator,
    BoundingBox,
    WidgetDescriptor,
    WidgetPlacement,
    ColumnDefinition,
    ColumnPreferences,
)
from .config import (
    LayoutConfig,
    DragConfig,
    PersistenceConfig,
    LayoutEngineConfig,
    get_config,
)
from .calculator import LayoutCalculator, calculate_layout, group_rows
from .reorder import (
    DragEvent,
    DragEventKind,
    DragReorderController,
    array_move,
    compute_drop_indicator,
    reorder,
)
from .registry import DEFAULT_WIDGETS, WidgetRegistry, get_default_registry, initial_placements
from .customization import WidgetCustomizationStore
from .persistence import (
    StorageResult,
    StoragePort,
    InMemoryStorage,
    JsonFileStorage,
    UnavailableStorage,
    PreferenceStore,
    ColumnPreferenceStore,
    WidgetPreferenceStore,
    build_storage,
    reconcile_preferences,
)
from .columns import HOLDINGS_COLUMNS, HOLDINGS_COLUMNS_KEY, ColumnLayoutEngine
from .table_view import TableQuery, apply_query, classify_asset_class

__all__ = [
    # Types
    "WidgetWidth",
    "WidgetCategory",
    "DropPosition",
    "DragState",
    "DropIndicator",
    "BoundingBox",
    "WidgetDescriptor",
    "WidgetPlacement",
    "ColumnDefinition",
    "ColumnPreferences",

    # Config
    "LayoutConfig",
    "DragConfig",
    "PersistenceConfig",
    "LayoutEngineConfig",
    "get_config",

    # Calculator
    "LayoutCalculator",
    "calculate_layout",
    "group_rows",

    # Reorder
    "DragEvent",
    "DragEventKind",
    "DragReorderController",
    "array_move",
    "compute_drop_indicator",
    "reorder",

    # Registry & customization
    "DEFAULT_WIDGETS",
    "WidgetRegistry",
    "get_default_registry",
    "initial_placements",
    "WidgetCustomizationStore",

    # Persistence
    "StorageResult",
    "StoragePort",
    "InMemoryStorage",
    "JsonFileStorage",
    "UnavailableStorage",
    "PreferenceStore",
    "ColumnPreferenceStore",
    "WidgetPreferenceStore",
    "build_storage",
    "reconcile_preferences",

    # Columns & table view
    "HOLDINGS_COLUMNS",
    "HOLDINGS_COLUMNS_KEY",
    "ColumnLayoutEngine",
    "TableQuery",
    "apply_query",
    "classify_asset_class",
]
