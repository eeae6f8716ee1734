import logging

from fastapi import APIRouter, Depends, Response, status

from folio.api.dependencies import get_index
from folio.api.schemas import HealthResponse, ReadinessResponse
from folio.core.index import ContentIndex
from folio.exceptions import LoadError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    index: ContentIndex = Depends(get_index),
) -> ReadinessResponse:
    """Readiness probe: can the content tree be loaded?"""
    try:
        documents = await index.documents(include_drafts=True)
    except LoadError as exc:
        logger.warning("Readiness check failed: %s", exc)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="degraded", content="down")
    return ReadinessResponse(status="ok", content="up", documents=len(documents))
