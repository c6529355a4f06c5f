"""Health check endpoint with user-store connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from patient_auth.core.config import Settings, get_settings
from patient_auth.core.database import check_db_connected, get_db
from patient_auth.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Used by load balancers and monitoring; reports whether Postgres answers."""
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(environment=settings.APP_ENV, database=db_status)
