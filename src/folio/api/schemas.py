from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    content: str = "up"
    documents: int = 0


class ErrorResponse(BaseModel):
    detail: str


class AuthorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    avatar: str | None = None
    bio: str | None = None


class TagSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    name: str


class PostSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    title: str
    excerpt: str
    published: bool
    published_at: datetime
    created_at: datetime
    updated_at: datetime
    author: AuthorSchema
    tags: list[TagSchema]
    category: str | None = None
    cover_image: str | None = None
    featured: bool = False
    featured_order: int | None = None
    reading_time: str
    views: int = 0


class TocEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    depth: int


class PostDetail(PostSummary):
    body: str
    content: str
    toc: list[TocEntry]
    previous: PostSummary | None = None
    next: PostSummary | None = None
    related: list[PostSummary] = Field(default_factory=list)


class PostPage(BaseModel):
    items: list[PostSummary]
    total: int
    page: int
    per_page: int
    total_pages: int


class LatestPostSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    title: str
    published_at: datetime


class ViewCount(BaseModel):
    id: str
    views: int


class TagCountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    name: str
    count: int


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    path: str
    name: str
    slug: str
    parent: str | None = None
    count: int
    level: int


class CategoryNode(CategorySchema):
    children: list[CategoryNode] = Field(default_factory=list)


CategoryNode.model_rebuild()


class ProjectSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    title: str
    description: str
    date: datetime
    tags: list[str]
    image: str | None = None
    github: str | None = None
    demo: str | None = None
    featured: bool = False
    status: str | None = None
    reading_time: str


class ProjectDetail(ProjectSummary):
    content: str
    toc: list[TocEntry]


class RevalidateRequest(BaseModel):
    """Body of POST /revalidate: cache tags to void; empty means every content tag."""

    tags: list[str] = Field(default_factory=list)


class RevalidateResponse(BaseModel):
    tags: list[str]
    voided: int
