"""Health check endpoint with optional database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse, response_model_exclude_none=True)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    check_db: bool = False,
) -> HealthResponse:
    """
    Return service health status. Unauthenticated; used by load balancers and monitoring.
    With check_db=true the response also reports database connectivity.
    """
    if not check_db:
        return HealthResponse()
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(database=db_status)
