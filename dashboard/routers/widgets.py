"""
FastAPI Router for Dashboard Widget Layout.

Provides:
- Widget catalog
- Initial layout
- Row packing for a client layout
- Drag-end reorder, enable/disable, remove
- Drop indicator computation
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from core.exceptions import LayoutValidationError, UnknownWidgetError
from dashboard.schemas import (
    CalculateLayoutRequest,
    DropIndicatorRequest,
    DropIndicatorResponse,
    EnabledWidgetsRequest,
    LayoutResponse,
    MoveWidgetRequest,
    RemoveWidgetRequest,
    WidgetRegistryResponse,
)
from dashboard.services import LayoutService
from layout_engine import get_config, get_default_registry

router = APIRouter(prefix="/widgets", tags=["Dashboard Widgets"])


# =============================================================
# HELPER: Get service instance
# =============================================================

def get_layout_service() -> LayoutService:
    return LayoutService(get_default_registry(), get_config())


def _bad_request(e: LayoutValidationError) -> HTTPException:
    if isinstance(e, UnknownWidgetError):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=400, detail=e.message)


def _items(items):
    return [item.model_dump() for item in items]


# =============================================================
# CATALOG
# =============================================================

@router.get("/registry", response_model=WidgetRegistryResponse)
def get_registry(service: LayoutService = Depends(get_layout_service)):
    """Get the catalog of widgets that can be added to the dashboard."""
    return WidgetRegistryResponse(data=[w.to_dict() for w in service.registry.all()])


# =============================================================
# LAYOUT ENDPOINTS
# =============================================================

@router.get("/layout", response_model=LayoutResponse)
def get_initial_layout(
    simple_mode: bool = Query(False, description="Hide widgets not shown in simple mode"),
    service: LayoutService = Depends(get_layout_service),
):
    """
    Get the mount-time layout.

    Default-enabled widgets at their default widths, packed into rows.
    """
    placements = service.initial_layout(simple_mode=simple_mode)
    return LayoutResponse(**service.layout_payload(placements))


@router.post("/layout/calculate", response_model=LayoutResponse)
def calculate_layout(
    request: CalculateLayoutRequest,
    service: LayoutService = Depends(get_layout_service),
):
    """Pack a client layout into rows."""
    try:
        placements = service.calculate(_items(request.items))
    except LayoutValidationError as e:
        raise _bad_request(e)
    return LayoutResponse(**service.layout_payload(placements))


@router.post("/layout/move", response_model=LayoutResponse)
def move_widget(
    request: MoveWidgetRequest,
    service: LayoutService = Depends(get_layout_service),
):
    """
    Commit a drag-end.

    Dropping on itself, on nothing, or on an unknown id leaves
    the order unchanged (changed=false).
    """
    try:
        placements, changed = service.move(_items(request.items), request.active_id, request.over_id)
    except LayoutValidationError as e:
        raise _bad_request(e)
    return LayoutResponse(changed=changed, **service.layout_payload(placements))


@router.post("/layout/enabled", response_model=LayoutResponse)
def set_enabled_widgets(
    request: EnabledWidgetsRequest,
    service: LayoutService = Depends(get_layout_service),
):
    """
    Replace the enabled widget set.

    Retained widgets keep their width, new widgets start at 1/3.
    """
    try:
        placements = service.set_enabled(_items(request.items), request.enabled_ids)
    except LayoutValidationError as e:
        raise _bad_request(e)
    return LayoutResponse(changed=True, **service.layout_payload(placements))


@router.post("/layout/remove", response_model=LayoutResponse)
def remove_widget(
    request: RemoveWidgetRequest,
    service: LayoutService = Depends(get_layout_service),
):
    """Remove a widget from the dashboard."""
    try:
        placements, changed = service.remove(_items(request.items), request.widget_id)
    except LayoutValidationError as e:
        raise _bad_request(e)
    return LayoutResponse(changed=changed, **service.layout_payload(placements))


# =============================================================
# DRAG ENDPOINTS
# =============================================================

@router.post("/drop-indicator", response_model=DropIndicatorResponse)
def get_drop_indicator(
    request: DropIndicatorRequest,
    service: LayoutService = Depends(get_layout_service),
):
    """
    Compute the drop hint for the hovered widget.

    No indicator when hovering nothing, the dragged widget itself,
    or the middle band of the hovered widget.
    """
    box = request.box.model_dump() if request.box else None
    indicator = service.drop_indicator(request.active_id, request.over_id, request.pointer_x, box)
    return DropIndicatorResponse(indicator=indicator.to_dict() if indicator else None)
