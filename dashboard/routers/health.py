from datetime import datetime

from fastapi import APIRouter

from dashboard.schemas import HealthResponse

router = APIRouter(prefix="/health", tags=["Health"])

# Startup time for uptime calculation
_startup_time = datetime.utcnow()

@router.get("", response_model=HealthResponse)
def health_check():
    """
    Health check endpoint.
    """
    uptime = (datetime.utcnow() - _startup_time).total_seconds()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        uptime_seconds=uptime,
    )
