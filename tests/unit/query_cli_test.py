"""Tests for the query, show and render CLI commands against a temporary content tree."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from folio.cli.app import app

runner = CliRunner()


@pytest.fixture
def env(content_root: Path, write_post: Callable[..., Path]) -> dict[str, str]:
    write_post("alpha.md", body="## Setup\n\nAlpha body.", date="2024-01-01T00:00:00Z", tags=["Python"])
    write_post("tech/beta.md", date="2024-02-01T00:00:00Z", tags=["Python", "Rust"], featured=True)
    write_post("gamma.md", date="2024-03-01T00:00:00Z", tags=["Go"], published=False)
    return {"FOLIO_CONTENT_DIR": str(content_root), "COLUMNS": "200"}


class TestQueryCommands:
    def test_posts(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "posts"], env=env)
        assert result.exit_code == 0, result.output
        assert "alpha" in result.output
        assert "beta" in result.output
        assert "gamma" not in result.output
        assert "(2 posts)" in result.output

    def test_posts_with_drafts_and_tag(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "posts", "--drafts", "--tag", "go"], env=env)
        assert result.exit_code == 0, result.output
        assert "gamma" in result.output
        assert "(1 posts)" in result.output

    def test_posts_rejects_unknown_sort(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "posts", "--sort", "random"], env=env)
        assert result.exit_code != 0

    def test_featured(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "featured", "--limit", "1"], env=env)
        assert result.exit_code == 0, result.output
        assert "beta" in result.output
        assert "alpha" not in result.output

    def test_tags(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "tags"], env=env)
        assert result.exit_code == 0, result.output
        assert "python" in result.output
        assert "rust" in result.output
        assert "go" not in result.output.split()

    def test_categories(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "categories"], env=env)
        assert result.exit_code == 0, result.output
        assert "Tech" in result.output

    def test_related(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "related", "alpha"], env=env)
        assert result.exit_code == 0, result.output
        assert "beta" in result.output

    def test_related_unknown_slug_exits_1(self, env: dict[str, str]) -> None:
        assert runner.invoke(app, ["query", "related", "nope"], env=env).exit_code == 1

    def test_missing_content_root_exits_1(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["query", "posts"], env={"FOLIO_CONTENT_DIR": str(tmp_path / "missing")})
        assert result.exit_code == 1


class TestShowCommand:
    def test_show(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["show", "alpha"], env=env)
        assert result.exit_code == 0, result.output
        assert "Alpha" in result.output
        assert "next: beta" in result.output
        assert "setup" in result.output

    def test_show_draft_requires_flag(self, env: dict[str, str]) -> None:
        assert runner.invoke(app, ["show", "gamma"], env=env).exit_code == 1
        assert runner.invoke(app, ["show", "gamma", "--draft"], env=env).exit_code == 0


class TestRenderCommand:
    def test_render_skips_front_matter(self, tmp_path: Path) -> None:
        source = tmp_path / "note.md"
        source.write_text("---\ntitle: x\n---\n# Hello\n\n> [!danger] Careful\n", encoding="utf-8")

        result = runner.invoke(app, ["render", str(source)])

        assert result.exit_code == 0, result.output
        assert '<h1 id="hello">' in result.output
        assert 'data-callout-type="danger"' in result.output
        assert "title: x" not in result.output

    def test_render_toc(self, tmp_path: Path) -> None:
        source = tmp_path / "note.md"
        source.write_text("## One\n\n### Two\n", encoding="utf-8")
        result = runner.invoke(app, ["render", str(source), "--toc"], env={"COLUMNS": "200"})
        assert result.exit_code == 0, result.output
        assert "one" in result.output
        assert "two" in result.output

    def test_render_missing_file(self, tmp_path: Path) -> None:
        assert runner.invoke(app, ["render", str(tmp_path / "nope.md")]).exit_code != 0


class TestGlobalOptions:
    def test_unknown_log_level_is_a_usage_error(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["--log-level", "LOUD", "query", "tags"], env=env)
        assert result.exit_code == 2
        assert "LOUD" in result.output

    def test_malformed_ttl_variable_is_a_usage_error(self, env: dict[str, str]) -> None:
        result = runner.invoke(app, ["query", "tags"], env={**env, "FOLIO_TTL_TAGS": "soon"})
        assert result.exit_code == 2
        assert "FOLIO_TTL_TAGS" in result.output
