"""Records produced by the loader, the index and the renderer.

All records are immutable. ``Document.views`` is the only value that changes
after load; the index overlays the live count from the view counter whenever a
document or list item leaves it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

SortOrder = Literal["latest", "views"]
ProjectStatus = Literal["completed", "in-progress", "archived"]


@dataclass(frozen=True)
class Tag:
    slug: str
    name: str


@dataclass(frozen=True)
class Author:
    id: str
    name: str
    avatar: str | None = None
    bio: str | None = None


@dataclass(frozen=True)
class Document:
    id: str
    slug: str
    title: str
    excerpt: str
    body: str
    published: bool
    published_at: datetime
    created_at: datetime
    updated_at: datetime
    author: Author
    tags: tuple[Tag, ...] = ()
    category: str | None = None
    cover_image: str | None = None
    featured: bool = False
    featured_order: int | None = None
    reading_time: str = ""
    reading_minutes: int = 0
    views: int = 0
    file_path: str = ""

    @property
    def tag_slugs(self) -> tuple[str, ...]:
        return tuple(t.slug for t in self.tags)


@dataclass(frozen=True)
class ListItem:
    id: str
    slug: str
    title: str
    excerpt: str
    published: bool
    published_at: datetime
    created_at: datetime
    updated_at: datetime
    author: Author
    tags: tuple[Tag, ...]
    category: str | None
    cover_image: str | None
    featured: bool
    featured_order: int | None
    reading_time: str
    views: int

    @classmethod
    def from_document(cls, doc: Document, views: int | None = None) -> ListItem:
        return cls(
            id=doc.id,
            slug=doc.slug,
            title=doc.title,
            excerpt=doc.excerpt,
            published=doc.published,
            published_at=doc.published_at,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            author=doc.author,
            tags=doc.tags,
            category=doc.category,
            cover_image=doc.cover_image,
            featured=doc.featured,
            featured_order=doc.featured_order,
            reading_time=doc.reading_time,
            views=doc.views if views is None else views,
        )


@dataclass(frozen=True)
class PostQuery:
    """Filters accepted by ``ContentIndex.query``."""

    search: str | None = None
    tag: str | None = None
    category: str | None = None
    sort: SortOrder = "latest"
    page: int = 1
    per_page: int = 9
    include_drafts: bool = False
    include_subcategories: bool = False

    def __post_init__(self) -> None:
        if self.sort not in ("latest", "views"):
            raise ValueError(f"Unsupported sort order {self.sort!r}; expected 'latest' or 'views'")


@dataclass(frozen=True)
class QueryResult:
    items: list[ListItem]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0


@dataclass(frozen=True)
class AdjacentPosts:
    previous: ListItem | None = None
    next: ListItem | None = None


@dataclass(frozen=True)
class LatestPost:
    slug: str
    title: str
    published_at: datetime


@dataclass(frozen=True)
class TagCount:
    slug: str
    name: str
    count: int


@dataclass(frozen=True)
class Category:
    path: str
    name: str
    slug: str
    parent: str | None
    count: int
    level: int


@dataclass(frozen=True)
class TocItem:
    id: str
    text: str
    depth: int


@dataclass(frozen=True)
class RenderedContent:
    content: str
    toc: tuple[TocItem, ...] = ()


@dataclass(frozen=True)
class Project:
    slug: str
    title: str
    description: str
    date: datetime
    body: str
    reading_time: str
    rendered: RenderedContent
    tags: tuple[str, ...] = ()
    image: str | None = None
    github: str | None = None
    demo: str | None = None
    featured: bool = False
    status: ProjectStatus | None = None
