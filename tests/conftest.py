"""Shared fixtures and helpers for tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
import yaml

from folio.core.slug import slugify
from folio.models import Author, Document, Tag

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Content-tree fixtures
# ---------------------------------------------------------------------------


def front_matter_text(fields: dict[str, Any]) -> str:
    return "---\n" + yaml.safe_dump(fields, sort_keys=False, allow_unicode=True) + "---\n"


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    root = tmp_path / "blog"
    root.mkdir()
    return root


@pytest.fixture
def write_post(content_root: Path) -> Callable[..., Path]:
    """Write a post under ``content_root``. Pass ``field=None`` to drop a default field."""

    def _write(relative_path: str, body: str = "Hello world.", **fields: Any) -> Path:
        data: dict[str, Any] = {
            "title": Path(relative_path).stem.replace("-", " ").title(),
            "excerpt": "An excerpt.",
            "date": "2024-01-01T00:00:00Z",
            "tags": ["Python"],
            "author": {"name": "Ada Lovelace"},
            "published": True,
        }
        data.update(fields)
        data = {key: value for key, value in data.items() if value is not None}
        path = content_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(front_matter_text(data) + "\n" + body, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Build a ``Document`` directly, without touching the filesystem."""

    def _make(
        slug: str,
        *,
        published_at: str = "2024-01-01T00:00:00",
        tags: tuple[str, ...] = (),
        category: str | None = None,
        published: bool = True,
        featured: bool = False,
        featured_order: int | None = None,
        title: str | None = None,
        excerpt: str | None = None,
        body: str | None = None,
    ) -> Document:
        when = datetime.fromisoformat(published_at).replace(tzinfo=timezone.utc)
        return Document(
            id=slug,
            slug=slug,
            title=title or slug.replace("-", " ").title(),
            excerpt=excerpt or f"About {slug}.",
            body=body if body is not None else f"Body of {slug}.",
            published=published,
            published_at=when,
            created_at=when,
            updated_at=when,
            author=Author(id="ada-lovelace", name="Ada Lovelace"),
            tags=tuple(Tag(slug=slugify(name), name=name) for name in tags),
            category=category,
            featured=featured,
            featured_order=featured_order,
            reading_time="1 min read",
            reading_minutes=1,
            file_path=f"{slug}.md",
        )

    return _make

