from fastapi import APIRouter, Depends

from dashboard.schemas import HoldingsQueryRequest, HoldingsQueryResponse
from dashboard.services import HoldingsTableService

router = APIRouter(prefix="/holdings", tags=["Holdings Table"])

@router.post("/query", response_model=HoldingsQueryResponse)
def query_holdings(
    request: HoldingsQueryRequest,
    service: HoldingsTableService = Depends(HoldingsTableService),
):
    """
    Sort, search and filter holdings rows.
    """
    params = request.model_dump(exclude={"rows"})
    rows = service.query(request.rows, **params)
    return HoldingsQueryResponse(rows=rows, total=len(rows))
