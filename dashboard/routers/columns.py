"""
FastAPI Router for Table Column Layout.

The browser keeps the column preferences in its local storage
and sends them along; responses carry the value to store back.
"""

from fastapi import APIRouter, Depends

from dashboard.schemas import (
    ColumnLayoutResponse,
    ColumnLoadRequest,
    ColumnMoveRequest,
    ColumnToggleRequest,
)
from dashboard.services import ColumnService, get_holdings_column_service
from layout_engine import ColumnPreferences

router = APIRouter(prefix="/columns", tags=["Table Columns"])


@router.get("/holdings", response_model=ColumnLayoutResponse)
def get_holdings_columns(service: ColumnService = Depends(get_holdings_column_service)):
    """Get holdings column definitions with default preferences."""
    engine = service.load(None)
    return ColumnLayoutResponse(**service.layout_payload(engine))


@router.post("/holdings/load", response_model=ColumnLayoutResponse)
def load_holdings_columns(
    request: ColumnLoadRequest,
    service: ColumnService = Depends(get_holdings_column_service),
):
    """
    Normalize a stored preferences blob.

    Missing, corrupt or structurally invalid blobs yield the defaults;
    stale blobs are merged with the current column set.
    """
    engine = service.load(request.blob)
    return ColumnLayoutResponse(**service.layout_payload(engine))


@router.post("/holdings/move", response_model=ColumnLayoutResponse)
def move_holdings_column(
    request: ColumnMoveRequest,
    service: ColumnService = Depends(get_holdings_column_service),
):
    """
    Move a column to the position of another.

    Moves involving a pinned column (actions, symbol) are rejected
    with changed=false.
    """
    prefs = ColumnPreferences(**request.preferences.model_dump())
    engine, changed = service.move(prefs, request.active_id, request.over_id)
    return ColumnLayoutResponse(changed=changed, **service.layout_payload(engine))


@router.post("/holdings/toggle", response_model=ColumnLayoutResponse)
def toggle_holdings_column(
    request: ColumnToggleRequest,
    service: ColumnService = Depends(get_holdings_column_service),
):
    """Show or hide a column. Pinned columns cannot be hidden."""
    prefs = ColumnPreferences(**request.preferences.model_dump())
    engine, changed = service.toggle(prefs, request.column_id)
    return ColumnLayoutResponse(changed=changed, **service.layout_payload(engine))
