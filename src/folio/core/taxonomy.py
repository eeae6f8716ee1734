"""Tag popularity and nested categories derived from a document set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from folio.core.slug import slugify
from folio.models import Category, Document, TagCount


def tag_counts(documents: Iterable[Document]) -> list[TagCount]:
    """Count published documents per tag slug, sorted by display name."""
    names: dict[str, str] = {}
    counts: dict[str, int] = {}
    for doc in documents:
        if not doc.published:
            continue
        for tag in doc.tags:
            names.setdefault(tag.slug, tag.name)
            counts[tag.slug] = counts.get(tag.slug, 0) + 1

    result = [TagCount(slug=slug, name=names[slug], count=count) for slug, count in counts.items()]
    result.sort(key=lambda t: (t.name.casefold(), t.slug))
    return result


def category_name(path: str) -> str:
    segment = path.rsplit("/", 1)[-1]
    return segment[:1].upper() + segment[1:]


def parent_path(path: str) -> str | None:
    if "/" not in path:
        return None
    return path.rsplit("/", 1)[0]


def is_within(path: str | None, ancestor: str) -> bool:
    """True when ``path`` equals ``ancestor`` or lies beneath it."""
    if path is None:
        return False
    return path == ancestor or path.startswith(ancestor + "/")


def build_categories(documents: Iterable[Document], aggregate_descendants: bool = False) -> list[Category]:
    """Every category path in use plus all of its ancestors, sorted by level then path.

    Counts are exact matches unless ``aggregate_descendants`` is set, in which
    case a category also counts the documents of all of its descendants.
    """
    exact: dict[str, int] = {}
    paths: set[str] = set()
    for doc in documents:
        if not doc.published or not doc.category:
            continue
        exact[doc.category] = exact.get(doc.category, 0) + 1
        path: str | None = doc.category
        while path is not None:
            paths.add(path)
            path = parent_path(path)

    categories = []
    for path in paths:
        if aggregate_descendants:
            count = sum(n for p, n in exact.items() if is_within(p, path))
        else:
            count = exact.get(path, 0)
        categories.append(
            Category(
                path=path,
                name=category_name(path),
                slug=slugify(path),
                parent=parent_path(path),
                count=count,
                level=path.count("/"),
            )
        )
    categories.sort(key=lambda c: (c.level, c.path))
    return categories


@dataclass
class CategoryTree:
    """Categories indexed by path, with ordered child lists."""

    nodes: dict[str, Category] = field(default_factory=dict)
    children: dict[str, list[str]] = field(default_factory=dict)
    roots: list[str] = field(default_factory=list)

    def get(self, path: str) -> Category | None:
        return self.nodes.get(path)

    def children_of(self, path: str) -> list[Category]:
        return [self.nodes[p] for p in self.children.get(path, [])]

    def walk(self) -> Iterator[tuple[Category, int]]:
        """Depth-first traversal yielding ``(category, depth)``."""
        stack = [(path, 0) for path in reversed(self.roots)]
        while stack:
            path, depth = stack.pop()
            yield self.nodes[path], depth
            stack.extend((child, depth + 1) for child in reversed(self.children.get(path, [])))

    def __len__(self) -> int:
        return len(self.nodes)


def build_category_tree(categories: Iterable[Category]) -> CategoryTree:
    tree = CategoryTree()
    ordered = list(categories)
    for category in ordered:
        tree.nodes[category.path] = category
    for category in ordered:
        if category.parent is not None and category.parent in tree.nodes:
            tree.children.setdefault(category.parent, []).append(category.path)
        else:
            tree.roots.append(category.path)
    return tree
