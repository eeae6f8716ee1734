"""Tests for the filesystem document loader."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

from folio.core.loader import DocumentLoader, is_content_file
from folio.exceptions import LoadError, ParseError


class TestIsContentFile:
    @pytest.mark.parametrize("name", ["post.md", "post.mdx", "POST.MD"])
    def test_markdown_files(self, name: str) -> None:
        assert is_content_file(Path(name)) is True

    @pytest.mark.parametrize("name", ["README.md", "readme.mdx", "notes.txt", "image.png", "Makefile"])
    def test_other_files(self, name: str) -> None:
        assert is_content_file(Path(name)) is False


class TestLoadAll:
    @pytest.mark.asyncio
    async def test_loads_nested_tree(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("hello.md")
        write_post("tech/web/react-hooks.mdx", tags=["React", "Next.js"])
        (content_root / "notes.txt").write_text("ignored")
        (content_root / "README.md").write_text("# not a post")

        docs = {d.slug: d for d in await DocumentLoader(content_root).load_all()}

        assert set(docs) == {"hello", "react-hooks"}
        react = docs["react-hooks"]
        assert react.category == "tech/web"
        assert react.file_path == "tech/web/react-hooks.mdx"
        assert react.tag_slugs == ("react", "nextjs")
        assert react.published_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert react.id == react.slug
        assert docs["hello"].category is None

    @pytest.mark.asyncio
    async def test_front_matter_slug_wins(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("2024-01-01-hello.md", slug="hello-world")
        docs = await DocumentLoader(content_root).load_all()
        assert [d.slug for d in docs] == ["hello-world"]

    @pytest.mark.asyncio
    async def test_front_matter_category_used_at_root(
        self, content_root: Path, write_post: Callable[..., Path]
    ) -> None:
        write_post("a.md", category="/life//travel/")
        write_post("tech/b.md", category="ignored")
        docs = {d.slug: d for d in await DocumentLoader(content_root).load_all()}
        assert docs["a"].category == "life/travel"
        assert docs["b"].category == "tech"

    @pytest.mark.asyncio
    async def test_invalid_file_is_skipped_and_logged(
        self,
        content_root: Path,
        write_post: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_post("good.md")
        write_post("bad.md", title=None)
        (content_root / "nofm.md").write_text("# no front-matter")

        with caplog.at_level(logging.WARNING, logger="folio.core.loader"):
            docs = await DocumentLoader(content_root).load_all()

        assert [d.slug for d in docs] == ["good"]
        assert "bad.md" in caplog.text
        assert "nofm.md" in caplog.text

    @pytest.mark.asyncio
    async def test_impossible_yaml_date_skips_only_that_file(
        self,
        content_root: Path,
        write_post: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_post("good.md")
        (content_root / "bad.md").write_text(
            "---\ntitle: Bad\nexcerpt: x\ndate: 2024-13-45\ntags: [python]\nauthor: Ada\n---\nBody",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING, logger="folio.core.loader"):
            docs = await DocumentLoader(content_root).load_all()

        assert [d.slug for d in docs] == ["good"]
        assert "bad.md" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores directory permissions")
    async def test_unreadable_subdirectory_is_skipped(
        self,
        content_root: Path,
        write_post: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_post("top.md")
        write_post("open/visible.md")
        write_post("locked/hidden.md")
        locked = content_root / "locked"
        locked.chmod(0)
        try:
            with caplog.at_level(logging.WARNING, logger="folio.core.loader"):
                docs = await DocumentLoader(content_root).load_all()
        finally:
            locked.chmod(0o755)

        assert sorted(d.slug for d in docs) == ["top", "visible"]
        assert "Skipping unreadable directory" in caplog.text
        assert "locked" in caplog.text

    @pytest.mark.asyncio
    async def test_duplicate_slug_keeps_later_file(
        self,
        content_root: Path,
        write_post: Callable[..., Path],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_post("a/post.md", title="First")
        write_post("b/post.md", title="Second")

        with caplog.at_level(logging.WARNING, logger="folio.core.loader"):
            docs = await DocumentLoader(content_root).load_all()

        assert [d.title for d in docs] == ["Second"]
        assert "a/post.md" in caplog.text
        assert "b/post.md" in caplog.text

    @pytest.mark.asyncio
    async def test_drafts_are_loaded(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("draft.md", published=False)
        docs = await DocumentLoader(content_root).load_all()
        assert docs[0].published is False

    @pytest.mark.asyncio
    async def test_empty_root_yields_no_documents(self, content_root: Path) -> None:
        assert await DocumentLoader(content_root).load_all() == []

    @pytest.mark.asyncio
    async def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError):
            await DocumentLoader(tmp_path / "nope").load_all()

    @pytest.mark.asyncio
    async def test_root_that_is_a_file_raises(self, tmp_path: Path) -> None:
        target = tmp_path / "file.md"
        target.write_text("x")
        with pytest.raises(LoadError):
            await DocumentLoader(target).load_all()


class TestLoadFile:
    def test_timestamps_are_ordered(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        path = write_post("post.md")
        os.utime(path, (0, 1_000_000_000))
        doc = DocumentLoader(content_root).load_file("post.md")
        assert doc.updated_at >= doc.created_at
        assert doc.created_at.tzinfo is not None

    def test_reading_time_and_author(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("post.md", body=" ".join(["word"] * 450), author={"name": "Grace Hopper", "bio": "Admiral"})
        doc = DocumentLoader(content_root).load_file("post.md")
        assert doc.reading_time == "3 min read"
        assert doc.reading_minutes == 3
        assert doc.author.id == "grace-hopper"
        assert doc.author.bio == "Admiral"

    def test_duplicate_tags_keep_first_name(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("post.md", tags="Python, python, PYTHON, Rust")
        doc = DocumentLoader(content_root).load_file("post.md")
        assert [(t.slug, t.name) for t in doc.tags] == [("python", "Python"), ("rust", "Rust")]

    def test_invalid_front_matter_raises(self, content_root: Path, write_post: Callable[..., Path]) -> None:
        write_post("post.md", published="sometimes")
        with pytest.raises(ParseError) as exc_info:
            DocumentLoader(content_root).load_file("post.md")
        assert exc_info.value.path == "post.md"
