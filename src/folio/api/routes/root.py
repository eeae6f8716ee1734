from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """API directory for programmatic and human clients."""
    return {
        "meta": {
            "title": "Folio API",
            "description": "Query, render and revalidate the posts of a markdown content tree.",
            "version": "0.1.0",
        },
        "links": {
            "self": "/",
            "posts": "/posts",
            "featured": "/posts/featured",
            "latest": "/posts/latest",
            "tags": "/tags",
            "categories": "/categories",
            "projects": "/projects",
            "revalidate": "/revalidate",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
