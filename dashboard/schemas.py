"""
Pydantic schemas for Dashboard Layout API requests and responses.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# =======================
# COMMON
# =======================

class BaseResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
    uptime_seconds: float = 0

# =======================
# 1. WIDGETS
# =======================

class WidgetDescriptorSchema(BaseModel):
    id: str
    title: str
    description: str
    category: str
    default_enabled: bool
    default_width: str  # 1/3, 1/2, 1/1
    hidden_in_simple_mode: bool

class WidgetRegistryResponse(BaseResponse):
    data: List[WidgetDescriptorSchema]

class PlacementIn(BaseModel):
    id: str
    width: str = "1/3"

class PlacementOut(BaseModel):
    id: str
    title: Optional[str] = None
    width: str
    row: int

class LayoutResponse(BaseResponse):
    placements: List[PlacementOut]
    rows: List[List[str]]  # widget ids per grid row
    changed: bool = False

class CalculateLayoutRequest(BaseModel):
    items: List[PlacementIn]

class MoveWidgetRequest(BaseModel):
    items: List[PlacementIn]
    active_id: str
    over_id: Optional[str] = None

class EnabledWidgetsRequest(BaseModel):
    items: List[PlacementIn]
    enabled_ids: List[str]

class RemoveWidgetRequest(BaseModel):
    items: List[PlacementIn]
    widget_id: str

# =======================
# 2. DRAG
# =======================

class BoundingBoxSchema(BaseModel):
    left: float
    width: float = Field(ge=0)

class DropIndicatorRequest(BaseModel):
    active_id: str
    over_id: Optional[str] = None
    pointer_x: float
    box: Optional[BoundingBoxSchema] = None

class DropIndicatorSchema(BaseModel):
    over_id: str
    position: Literal["before", "after"]

class DropIndicatorResponse(BaseResponse):
    indicator: Optional[DropIndicatorSchema] = None

# =======================
# 3. COLUMNS
# =======================

class ColumnDefinitionSchema(BaseModel):
    id: str
    label: str
    sort_key: Optional[str] = None
    default_visible: bool
    always_visible: bool

class ColumnPreferencesSchema(BaseModel):
    order: List[str]
    visibility: Dict[str, bool]

class ColumnLayoutResponse(BaseResponse):
    definitions: List[ColumnDefinitionSchema]
    preferences: ColumnPreferencesSchema
    visible_columns: List[str]
    movable_columns: List[str]
    changed: bool = False

class ColumnLoadRequest(BaseModel):
    # Raw local-storage value (string) or an already decoded object
    blob: Optional[Union[str, Dict[str, Any]]] = None

class ColumnMoveRequest(BaseModel):
    preferences: ColumnPreferencesSchema
    active_id: str
    over_id: Optional[str] = None

class ColumnToggleRequest(BaseModel):
    preferences: ColumnPreferencesSchema
    column_id: str

# =======================
# 4. HOLDINGS TABLE
# =======================

class HoldingsQueryRequest(BaseModel):
    rows: List[Dict[str, Any]]
    search_term: str = ""
    asset_class: str = "All"
    account_type: str = "All"
    sort_key: Optional[str] = None
    sort_direction: Literal["asc", "desc"] = "asc"

class HoldingsQueryResponse(BaseResponse):
    rows: List[Dict[str, Any]]
    total: int
