import asyncio
from typing import Annotated, NoReturn

import typer

from folio.cli.common import err_console, get_index, render_table
from folio.config import load_settings
from folio.exceptions import LoadError
from folio.models import ListItem, PostQuery

query_app = typer.Typer(help="Query the content index.")

_POST_HEADERS = ["slug", "title", "published", "category", "tags", "views"]


def _post_row(item: ListItem) -> tuple[str, ...]:
    return (
        item.slug,
        item.title,
        item.published_at.date().isoformat(),
        item.category or "",
        ", ".join(t.slug for t in item.tags),
        str(item.views),
    )


def _fail(exc: LoadError) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


@query_app.command("posts")
def posts(
    search: Annotated[str | None, typer.Option("--search", "-s", help="Search title, excerpt and body.")] = None,
    tag: Annotated[str | None, typer.Option(help="Filter by tag slug or name.")] = None,
    category: Annotated[str | None, typer.Option(help="Filter by category path.")] = None,
    subcategories: Annotated[bool, typer.Option(help="Also match posts in subcategories.")] = False,
    sort: Annotated[str, typer.Option(help="latest or views.")] = "latest",
    page: Annotated[int, typer.Option(min=1, help="1-based page number.")] = 1,
    per_page: Annotated[int | None, typer.Option(min=1, help="Posts per page (default: FOLIO_PER_PAGE).")] = None,
    drafts: Annotated[bool, typer.Option(help="Include unpublished posts.")] = False,
) -> None:
    """List posts matching the given filters."""
    if sort not in ("latest", "views"):
        raise typer.BadParameter("expected 'latest' or 'views'", param_hint="--sort")
    index = get_index()
    filters = PostQuery(
        search=search,
        tag=tag,
        category=category,
        include_subcategories=subcategories,
        sort=sort,  # type: ignore[arg-type]
        page=page,
        per_page=per_page or load_settings().per_page,
        include_drafts=drafts,
    )

    async def _run() -> None:
        try:
            result = await index.query(filters)
        except LoadError as exc:
            _fail(exc)
        render_table(
            _POST_HEADERS,
            [_post_row(item) for item in result.items],
            footer=f"page {result.page}/{max(result.total_pages, 1)} ({result.total} posts)",
        )

    asyncio.run(_run())


@query_app.command("featured")
def featured(
    limit: Annotated[int, typer.Option(min=1, help="Number of posts.")] = 3,
) -> None:
    """List featured posts, topped up with the newest posts."""
    index = get_index()

    async def _run() -> None:
        try:
            items = await index.featured(limit)
        except LoadError as exc:
            _fail(exc)
        render_table(_POST_HEADERS, [_post_row(item) for item in items])

    asyncio.run(_run())


@query_app.command("tags")
def tags() -> None:
    """List tags by name with their post counts."""
    index = get_index()

    async def _run() -> None:
        try:
            counts = await index.tag_counts()
        except LoadError as exc:
            _fail(exc)
        render_table(["slug", "name", "count"], [(t.slug, t.name, t.count) for t in counts])

    asyncio.run(_run())


@query_app.command("categories")
def categories(
    aggregate: Annotated[bool, typer.Option(help="Count posts of subcategories too.")] = False,
) -> None:
    """Show the category tree."""
    index = get_index()

    async def _run() -> None:
        try:
            tree = await index.category_tree(aggregate_descendants=aggregate)
        except LoadError as exc:
            _fail(exc)
        rows = [("  " * depth + category.name, category.path, category.count) for category, depth in tree.walk()]
        render_table(["name", "path", "count"], rows)

    asyncio.run(_run())


@query_app.command("related")
def related(
    slug: Annotated[str, typer.Argument(help="Slug of the post to find relatives of.")],
    limit: Annotated[int | None, typer.Option(min=1, help="Max posts (default: FOLIO_RELATED_LIMIT).")] = None,
) -> None:
    """List posts sharing a tag with SLUG."""
    index = get_index()

    async def _run() -> None:
        try:
            doc = await index.get_by_slug(slug)
            if doc is None:
                err_console.print(f"[red]Post {slug!r} not found[/red]")
                raise typer.Exit(1)
            items = await index.related(doc.id, doc.tag_slugs, limit or load_settings().related_limit)
        except LoadError as exc:
            _fail(exc)
        render_table(_POST_HEADERS, [_post_row(item) for item in items])

    asyncio.run(_run())
