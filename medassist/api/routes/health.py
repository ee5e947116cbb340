"""
Health Check Routes - liveness and readiness probes.
"""
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from pydantic import Field

from medassist import __version__
from medassist.core.config import check_environment
from medassist.core.logging_config import get_logger
from medassist.models.chat import HealthResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class ReadinessResponse(HealthResponse):
    environment: Dict[str, Any] = Field(default_factory=dict)


@router.get("", response_model=HealthResponse, summary="Health check endpoint")
async def health_check() -> HealthResponse:
    """The API process is up. Does not touch the model providers."""
    return HealthResponse(status="healthy", version=__version__, timestamp=datetime.utcnow())


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness check endpoint")
async def readiness_check() -> ReadinessResponse:
    """
    Ready when every required credential is configured.

    The environment report shows masked values only.
    """
    environment = check_environment()
    status = "ready" if environment["all_required"] else "degraded"
    if status != "ready":
        logger.warning(f"Missing required configuration: {environment['missing_required']}")

    return ReadinessResponse(
        status=status,
        version=__version__,
        timestamp=datetime.utcnow(),
        environment=environment,
    )
