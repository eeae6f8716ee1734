from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from folio.core.cache import CacheLayer, CachePolicy
from folio.core.index import ContentIndex
from folio.core.loader import DocumentLoader
from folio.core.projects import ProjectCatalog
from folio.core.render import MarkdownRenderer
from folio.core.views import ViewCounter

_TTL_VARIABLES: dict[str, str] = {
    "corpus": "FOLIO_TTL_CORPUS",
    "post": "FOLIO_TTL_POST",
    "featured": "FOLIO_TTL_FEATURED",
    "tags": "FOLIO_TTL_TAGS",
    "categories": "FOLIO_TTL_CATEGORIES",
    "latest": "FOLIO_TTL_LATEST",
    "markdown": "FOLIO_TTL_MARKDOWN",
    "projects": "FOLIO_TTL_PROJECTS",
}


@dataclass(frozen=True)
class Settings:
    content_dir: Path = Path("content/blog")
    projects_dir: Path = Path("content/work")
    per_page: int = 9
    related_limit: int = 3
    log_level: str = "INFO"
    cache: CachePolicy = field(default_factory=CachePolicy)


@dataclass(frozen=True)
class Services:
    index: ContentIndex
    projects: ProjectCatalog
    cache: CacheLayer
    counter: ViewCounter
    renderer: MarkdownRenderer


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings(env: Mapping[str, str] = os.environ) -> Settings:
    """Read settings from ``FOLIO_*`` environment variables."""
    defaults = CachePolicy()
    policy = CachePolicy(
        **{attr: _int(env, name, int(getattr(defaults, attr))) for attr, name in _TTL_VARIABLES.items()}
    )
    return Settings(
        content_dir=Path(env.get("FOLIO_CONTENT_DIR") or "content/blog"),
        projects_dir=Path(env.get("FOLIO_PROJECTS_DIR") or "content/work"),
        per_page=_int(env, "FOLIO_PER_PAGE", 9),
        related_limit=_int(env, "FOLIO_RELATED_LIMIT", 3),
        log_level=(env.get("FOLIO_LOG_LEVEL") or "INFO").upper(),
        cache=policy,
    )


def build_services(settings: Settings | None = None) -> Services:
    settings = settings or load_settings()
    cache = CacheLayer()
    counter = ViewCounter()
    renderer = MarkdownRenderer(cache, ttl_seconds=settings.cache.markdown)
    index = ContentIndex(DocumentLoader(settings.content_dir), cache, counter, renderer, settings.cache)
    projects = ProjectCatalog(settings.projects_dir, cache, renderer, ttl_seconds=settings.cache.projects)
    return Services(index=index, projects=projects, cache=cache, counter=counter, renderer=renderer)


def build_index(settings: Settings | None = None) -> ContentIndex:
    return build_services(settings).index
