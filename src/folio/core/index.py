"""Query and derived-view operations over the cached document set."""

from __future__ import annotations

import dataclasses
import logging
from bisect import bisect_left
from collections.abc import Iterable
from datetime import datetime

from folio.core import taxonomy
from folio.core.cache import CacheLayer, CachePolicy
from folio.core.ports.counter import ViewCounterPort
from folio.core.ports.source import DocumentSource
from folio.core.render import MarkdownRenderer
from folio.core.taxonomy import CategoryTree
from folio.models import (
    AdjacentPosts,
    Category,
    Document,
    LatestPost,
    ListItem,
    PostQuery,
    QueryResult,
    RenderedContent,
    TagCount,
)

logger = logging.getLogger(__name__)

POSTS_TAG = "posts"
FEATURED_TAG = "featured"
TAGS_TAG = "tags"
CATEGORIES_TAG = "categories"
LATEST_TAG = "latest"
CONTENT_TAGS: tuple[str, ...] = (POSTS_TAG, FEATURED_TAG, TAGS_TAG, CATEGORIES_TAG, LATEST_TAG)

CORPUS_KEY = "documents:all"


def _latest_key(doc: Document) -> tuple[float, str]:
    return (-doc.published_at.timestamp(), doc.id)


def _has_tag(doc: Document, tag: str) -> bool:
    folded = tag.casefold()
    return any(t.slug == tag or t.name.casefold() == folded for t in doc.tags)


def _matches_search(doc: Document, needle: str) -> bool:
    return needle in doc.title.casefold() or needle in doc.excerpt.casefold() or needle in doc.body.casefold()


class ContentIndex:
    """Answers queries against the document set held by the cache layer.

    Documents are cached without view counts; every document or list item
    returned carries the live count from the view counter.
    """

    def __init__(
        self,
        loader: DocumentSource,
        cache: CacheLayer,
        counter: ViewCounterPort,
        renderer: MarkdownRenderer,
        policy: CachePolicy | None = None,
    ) -> None:
        self._loader = loader
        self._cache = cache
        self._counter = counter
        self._renderer = renderer
        self._policy = policy or CachePolicy()

    @property
    def cache(self) -> CacheLayer:
        return self._cache

    async def documents(self, include_drafts: bool = False) -> list[Document]:
        docs = await self._cache.memoize(
            CORPUS_KEY,
            self._policy.corpus,
            (POSTS_TAG,),
            self._load_corpus,
            stale_if_error=True,
        )
        if include_drafts:
            return list(docs)
        return [d for d in docs if d.published]

    async def query(self, filters: PostQuery | None = None) -> QueryResult:
        filters = filters or PostQuery()
        page = max(1, filters.page)
        per_page = max(1, filters.per_page)

        docs = await self.documents(include_drafts=filters.include_drafts)

        category = (filters.category or "").strip("/")
        if category:
            if filters.include_subcategories:
                docs = [d for d in docs if taxonomy.is_within(d.category, category)]
            else:
                docs = [d for d in docs if d.category == category]

        if filters.tag:
            docs = [d for d in docs if _has_tag(d, filters.tag)]

        needle = (filters.search or "").strip().casefold()
        if needle:
            docs = [d for d in docs if _matches_search(d, needle)]

        views = {d.id: self._counter.get(d.id) for d in docs}
        if filters.sort == "views":
            docs.sort(key=lambda d: (-views[d.id], *_latest_key(d)))
        else:
            docs.sort(key=_latest_key)

        skip = (page - 1) * per_page
        items = [ListItem.from_document(d, views=views[d.id]) for d in docs[skip : skip + per_page]]
        return QueryResult(items=items, total=len(docs), page=page, per_page=per_page)

    async def featured(self, limit: int = 3) -> list[ListItem]:
        """Featured posts by ``featured_order``, backfilled with the newest other posts."""
        if limit <= 0:
            return []

        async def _produce() -> tuple[Document, ...]:
            docs = await self.documents()
            chosen = [d for d in docs if d.featured]
            chosen.sort(key=lambda d: (d.featured_order is None, d.featured_order or 0))
            chosen = chosen[:limit]
            if len(chosen) < limit:
                rest = sorted((d for d in docs if not d.featured), key=_latest_key)
                chosen.extend(rest[: limit - len(chosen)])
            return tuple(chosen)

        docs = await self._cache.memoize(
            f"featured:{limit}",
            self._policy.featured,
            (POSTS_TAG, FEATURED_TAG),
            _produce,
        )
        return [self._item(d) for d in docs]

    async def get_by_slug(self, slug: str, include_draft: bool = False) -> Document | None:
        """Look a post up by slug. Drafts are only visible with ``include_draft``.

        Preview lookups are never stored so editors always see the file on disk.
        """
        if include_draft:
            key, ttl = f"post:{slug}:preview", 0.0
        else:
            key, ttl = f"post:{slug}", self._policy.post

        async def _find() -> Document | None:
            docs = await self.documents(include_drafts=include_draft)
            return next((d for d in docs if d.slug == slug), None)

        doc = await self._cache.memoize(key, ttl, (POSTS_TAG, f"post:{slug}"), _find)
        return self._with_views(doc) if doc is not None else None

    async def adjacent(self, published_at: datetime, document_id: str) -> AdjacentPosts:
        """Neighbours of a post in newest-first order: ``previous`` is older, ``next`` newer."""
        docs = sorted(await self.documents(), key=_latest_key)
        keys = [_latest_key(d) for d in docs]

        position: int | None = bisect_left(keys, (-published_at.timestamp(), document_id))
        if position >= len(docs) or docs[position].id != document_id:
            position = next((i for i, d in enumerate(docs) if d.id == document_id), None)
        if position is None:
            return AdjacentPosts()

        older = docs[position + 1] if position + 1 < len(docs) else None
        newer = docs[position - 1] if position > 0 else None
        return AdjacentPosts(
            previous=self._item(older) if older is not None else None,
            next=self._item(newer) if newer is not None else None,
        )

    async def related(self, document_id: str, tag_slugs: Iterable[str], limit: int = 3) -> list[ListItem]:
        wanted = set(tag_slugs)
        if not wanted or limit <= 0:
            return []
        docs = [d for d in await self.documents() if d.id != document_id and wanted.intersection(d.tag_slugs)]
        docs.sort(key=_latest_key)
        return [self._item(d) for d in docs[:limit]]

    def increment_views(self, document_id: str) -> int:
        return self._counter.increment(document_id)

    async def tag_counts(self) -> list[TagCount]:
        async def _produce() -> tuple[TagCount, ...]:
            return tuple(taxonomy.tag_counts(await self.documents()))

        return list(await self._cache.memoize("tags:counts", self._policy.tags, (TAGS_TAG,), _produce))

    async def categories(self, aggregate_descendants: bool = False) -> list[Category]:
        mode = "aggregate" if aggregate_descendants else "exact"

        async def _produce() -> tuple[Category, ...]:
            docs = await self.documents()
            return tuple(taxonomy.build_categories(docs, aggregate_descendants=aggregate_descendants))

        return list(
            await self._cache.memoize(f"categories:{mode}", self._policy.categories, (CATEGORIES_TAG,), _produce)
        )

    async def category_tree(self, aggregate_descendants: bool = False) -> CategoryTree:
        return taxonomy.build_category_tree(await self.categories(aggregate_descendants))

    async def latest(self) -> LatestPost | None:
        async def _produce() -> LatestPost | None:
            docs = await self.documents()
            if not docs:
                return None
            newest = min(docs, key=_latest_key)
            return LatestPost(slug=newest.slug, title=newest.title, published_at=newest.published_at)

        return await self._cache.memoize("posts:latest", self._policy.latest, (POSTS_TAG, LATEST_TAG), _produce)

    async def render(self, document: Document) -> RenderedContent:
        return await self._renderer.render(document.body)

    async def render_markdown(self, body: str) -> RenderedContent:
        return await self._renderer.render(body)

    async def get_rendered(self, slug: str, include_draft: bool = False) -> tuple[Document, RenderedContent] | None:
        doc = await self.get_by_slug(slug, include_draft=include_draft)
        if doc is None:
            return None
        return doc, await self.render(doc)

    def invalidate(self, tag: str) -> int:
        return self._cache.invalidate(tag)

    def refresh(self) -> int:
        """Void every content-derived cache entry; the next query reloads from disk."""
        voided = sum(self._cache.invalidate(tag) for tag in CONTENT_TAGS)
        logger.info("Content caches refreshed (%d entries voided)", voided)
        return voided

    async def _load_corpus(self) -> tuple[Document, ...]:
        return tuple(await self._loader.load_all())

    def _with_views(self, doc: Document) -> Document:
        return dataclasses.replace(doc, views=self._counter.get(doc.id))

    def _item(self, doc: Document) -> ListItem:
        return ListItem.from_document(doc, views=self._counter.get(doc.id))
