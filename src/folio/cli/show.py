import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.markdown import Markdown
from rich.panel import Panel

from folio.cli.common import console, err_console, get_index, render_table
from folio.core.cache import CacheLayer
from folio.core.frontmatter import split_front_matter
from folio.core.render import MarkdownRenderer
from folio.exceptions import LoadError, ParseError, RenderError


def show(
    slug: Annotated[str, typer.Argument(help="Slug of the post.")],
    draft: Annotated[bool, typer.Option(help="Allow unpublished posts.")] = False,
) -> None:
    """Show one post with its metadata, neighbours and table of contents."""
    index = get_index()

    async def _run() -> None:
        try:
            found = await index.get_rendered(slug, include_draft=draft)
            if found is None:
                err_console.print(f"[red]Post {slug!r} not found[/red]")
                raise typer.Exit(1)
            doc, rendered = found
            adjacent = await index.adjacent(doc.published_at, doc.id)
        except (LoadError, RenderError) as exc:
            err_console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from exc

        meta = [
            f"[bold]{doc.title}[/bold]",
            doc.excerpt,
            "",
            f"slug: {doc.slug}",
            f"published: {doc.published_at.isoformat()}{'' if doc.published else ' (draft)'}",
            f"author: {doc.author.name}",
            f"category: {doc.category or '-'}",
            f"tags: {', '.join(t.name for t in doc.tags) or '-'}",
            f"reading time: {doc.reading_time}",
            f"previous: {adjacent.previous.slug if adjacent.previous else '-'}",
            f"next: {adjacent.next.slug if adjacent.next else '-'}",
        ]
        console.print(Panel("\n".join(meta), expand=False))
        if rendered.toc:
            render_table(["id", "heading", "depth"], [(t.id, t.text, t.depth) for t in rendered.toc])
        console.print(Markdown(doc.body))

    asyncio.run(_run())


def render(
    file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown file to render.")],
    toc: Annotated[bool, typer.Option(help="Print the table of contents instead of HTML.")] = False,
) -> None:
    """Render a markdown file to HTML on stdout. A leading front-matter block is skipped."""
    raw = file.read_text(encoding="utf-8")
    body = raw
    if raw.removeprefix("\ufeff").startswith("---"):
        try:
            _, body = split_front_matter(raw, file.name)
        except ParseError as exc:
            err_console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from exc

    renderer = MarkdownRenderer(CacheLayer())
    try:
        rendered = asyncio.run(renderer.render(body))
    except RenderError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    if toc:
        render_table(["id", "heading", "depth"], [(t.id, t.text, t.depth) for t in rendered.toc])
    else:
        typer.echo(rendered.content, nl=False)
