"""FastMCP server exposing folio content tools."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastmcp import FastMCP

from folio.core.index import ContentIndex
from folio.exceptions import RenderError
from folio.models import ListItem, PostQuery


def _summary(item: ListItem) -> dict[str, Any]:
    return {
        "slug": item.slug,
        "title": item.title,
        "excerpt": item.excerpt,
        "published_at": item.published_at.isoformat(),
        "category": item.category,
        "tags": [t.slug for t in item.tags],
        "reading_time": item.reading_time,
        "views": item.views,
    }


def create_mcp_server(index: ContentIndex) -> FastMCP:
    """Create a FastMCP server wired to the given content index."""

    mcp = FastMCP("folio", instructions="Search, read and render the posts of a markdown content tree.")

    @mcp.tool()
    async def search_posts(
        query: str | None = None,
        tag: str | None = None,
        category: str | None = None,
        sort: str = "latest",
        page: int = 1,
        per_page: int = 9,
    ) -> dict[str, Any]:
        """Search published posts with optional tag and category filters."""
        if sort not in ("latest", "views"):
            return {"error": f"Unsupported sort order {sort!r}; expected 'latest' or 'views'"}
        filters = PostQuery(
            search=query,
            tag=tag,
            category=category,
            sort=sort,  # type: ignore[arg-type]
            page=page,
            per_page=per_page,
        )
        result = await index.query(filters)
        return {
            "items": [_summary(item) for item in result.items],
            "total": result.total,
            "page": result.page,
            "total_pages": result.total_pages,
        }

    @mcp.tool()
    async def get_post(slug: str) -> dict[str, Any]:
        """Fetch one published post with its markdown body and table of contents."""
        found = await index.get_rendered(slug)
        if found is None:
            return {"error": f"Post {slug!r} not found"}
        doc, rendered = found
        return {
            **_summary(ListItem.from_document(doc)),
            "body": doc.body,
            "toc": [asdict(item) for item in rendered.toc],
        }

    @mcp.tool()
    async def featured_posts(limit: int = 3) -> list[dict[str, Any]]:
        """List featured posts, topped up with the newest posts."""
        return [_summary(item) for item in await index.featured(limit)]

    @mcp.tool()
    async def related_posts(slug: str, limit: int = 3) -> list[dict[str, Any]]:
        """List posts sharing a tag with the given post."""
        doc = await index.get_by_slug(slug)
        if doc is None:
            return []
        return [_summary(item) for item in await index.related(doc.id, doc.tag_slugs, limit)]

    @mcp.tool()
    async def list_tags() -> list[dict[str, Any]]:
        """List tags with the number of published posts carrying each."""
        return [asdict(t) for t in await index.tag_counts()]

    @mcp.tool()
    async def list_categories(aggregate: bool = False) -> list[dict[str, Any]]:
        """List categories, optionally counting posts of subcategories too."""
        return [asdict(c) for c in await index.categories(aggregate_descendants=aggregate)]

    @mcp.tool()
    async def render_markdown(markdown: str) -> dict[str, Any]:
        """Render a markdown snippet to HTML."""
        try:
            rendered = await index.render_markdown(markdown)
        except RenderError as exc:
            return {"error": str(exc)}
        return {"html": rendered.content, "toc": [asdict(item) for item in rendered.toc]}

    return mcp
