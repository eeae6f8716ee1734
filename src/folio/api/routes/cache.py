import logging

from fastapi import APIRouter, Depends

from folio.api.dependencies import get_index
from folio.api.schemas import RevalidateRequest, RevalidateResponse
from folio.core.index import CONTENT_TAGS, ContentIndex

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cache"])


@router.post("/revalidate", response_model=RevalidateResponse)
async def revalidate(
    body: RevalidateRequest | None = None,
    index: ContentIndex = Depends(get_index),
) -> RevalidateResponse:
    """Void cached entries by tag so the next request reloads from disk."""
    tags = body.tags if body is not None and body.tags else list(CONTENT_TAGS)
    voided = sum(index.invalidate(tag) for tag in tags)
    logger.info("Revalidated %s (%d entries)", ", ".join(tags), voided)
    return RevalidateResponse(tags=tags, voided=voided)
