from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio.api.dependencies import get_index, get_settings
from folio.api.schemas import LatestPostSchema, PostDetail, PostPage, PostSummary, TocEntry, ViewCount
from folio.config import Settings
from folio.core.index import ContentIndex
from folio.models import PostQuery

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostPage)
async def list_posts(
    q: str | None = Query(None, description="Case-insensitive search over title, excerpt and body."),
    tag: str | None = Query(None),
    category: str | None = Query(None),
    include_subcategories: bool = Query(False),
    sort: Literal["latest", "views"] = Query("latest"),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1, le=100),
    index: ContentIndex = Depends(get_index),
    settings: Settings = Depends(get_settings),
) -> PostPage:
    result = await index.query(
        PostQuery(
            search=q,
            tag=tag,
            category=category,
            include_subcategories=include_subcategories,
            sort=sort,
            page=page,
            per_page=per_page or settings.per_page,
        )
    )
    return PostPage(
        items=[PostSummary.model_validate(item) for item in result.items],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
        total_pages=result.total_pages,
    )


@router.get("/featured", response_model=list[PostSummary])
async def featured_posts(
    limit: int = Query(3, ge=1, le=50),
    index: ContentIndex = Depends(get_index),
) -> list[PostSummary]:
    return [PostSummary.model_validate(item) for item in await index.featured(limit)]


@router.get("/latest", response_model=LatestPostSchema)
async def latest_post(index: ContentIndex = Depends(get_index)) -> LatestPostSchema:
    latest = await index.latest()
    if latest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No published posts")
    return LatestPostSchema.model_validate(latest)


@router.get("/{slug}", response_model=PostDetail)
async def get_post(
    slug: str,
    index: ContentIndex = Depends(get_index),
    settings: Settings = Depends(get_settings),
) -> PostDetail:
    found = await index.get_rendered(slug)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Post {slug!r} not found")
    doc, rendered = found

    adjacent = await index.adjacent(doc.published_at, doc.id)
    related = await index.related(doc.id, doc.tag_slugs, settings.related_limit)
    return PostDetail.model_validate(
        {
            **PostSummary.model_validate(doc).model_dump(),
            "body": doc.body,
            "content": rendered.content,
            "toc": [TocEntry.model_validate(item) for item in rendered.toc],
            "previous": PostSummary.model_validate(adjacent.previous) if adjacent.previous else None,
            "next": PostSummary.model_validate(adjacent.next) if adjacent.next else None,
            "related": [PostSummary.model_validate(item) for item in related],
        }
    )


@router.post("/{document_id}/views", response_model=ViewCount)
async def increment_views(document_id: str, index: ContentIndex = Depends(get_index)) -> ViewCount:
    return ViewCount(id=document_id, views=index.increment_views(document_id))
