"""YAML front-matter splitting and the typed schemas content files are validated against."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Literal, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from folio.exceptions import ParseError

M = TypeVar("M", bound=BaseModel)

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL)


def split_front_matter(raw: str, path: str) -> tuple[dict[str, Any], str]:
    """Split ``raw`` into its parsed front-matter mapping and the markdown body."""
    match = _FRONT_MATTER_RE.match(raw.removeprefix("\ufeff"))
    if match is None:
        raise ParseError(path, "missing front-matter block")

    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, ValueError) as exc:
        raise ParseError(path, f"invalid YAML front-matter: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(path, "front-matter must be a mapping")
    return data, match.group(2)


def parse_datetime(value: Any) -> datetime:
    """Coerce a YAML date, datetime or ISO string to an aware UTC-based datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"expected an ISO date, got {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _split_tags(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return value


class AuthorFrontMatter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    avatar: str | None = None
    bio: str | None = None


class PostFrontMatter(BaseModel):
    """Front-matter of a blog post. Unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    title: str = Field(min_length=1)
    excerpt: str = Field(min_length=1)
    date: datetime
    tags: list[str]
    author: AuthorFrontMatter
    published: bool
    slug: str | None = None
    category: str | None = None
    cover_image: str | None = Field(default=None, alias="coverImage")
    featured: bool = False
    featured_order: int | None = Field(default=None, alias="featuredOrder")

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> datetime:
        return parse_datetime(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        return _split_tags(value)

    @field_validator("author", mode="before")
    @classmethod
    def _coerce_author(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"name": value}
        return value

    @field_validator("slug", "category", "cover_image", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProjectFrontMatter(BaseModel):
    """Front-matter of a portfolio project page."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date: datetime
    tags: list[str] = Field(default_factory=list)
    image: str | None = None
    github: str | None = None
    demo: str | None = None
    featured: bool = False
    status: Literal["completed", "in-progress", "archived"] | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> datetime:
        return parse_datetime(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        return _split_tags(value)


def validate_front_matter(model: type[M], data: dict[str, Any], path: str) -> M:
    """Validate ``data`` against ``model``, reporting failures as a ``ParseError`` for ``path``."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'front-matter'}: {err['msg']}" for err in exc.errors()
        )
        raise ParseError(path, problems) from exc
