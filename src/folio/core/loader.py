import asyncio
import logging
import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from folio.core.frontmatter import PostFrontMatter, split_front_matter, validate_front_matter
from folio.core.reading_time import reading_minutes, reading_time
from folio.core.slug import slugify
from folio.exceptions import LoadError, ParseError
from folio.models import Author, Document, Tag

logger = logging.getLogger(__name__)

CONTENT_EXTENSIONS: tuple[str, ...] = (".md", ".mdx")


def is_content_file(path: Path, extensions: Iterable[str] = CONTENT_EXTENSIONS) -> bool:
    """True for markdown/MDX files other than README files."""
    suffix = path.suffix.lower()
    if suffix not in tuple(extensions):
        return False
    return path.stem.lower() != "readme"


def _file_timestamps(path: Path) -> tuple[datetime, datetime]:
    stat = path.stat()
    born = getattr(stat, "st_birthtime", stat.st_ctime)
    created = min(born, stat.st_mtime)
    updated = max(born, stat.st_mtime)
    return (
        datetime.fromtimestamp(created, tz=timezone.utc),
        datetime.fromtimestamp(updated, tz=timezone.utc),
    )


def _normalize_category(value: str | None) -> str | None:
    if not value:
        return None
    parts = [part.strip() for part in value.replace("\\", "/").split("/") if part.strip()]
    return "/".join(parts) or None


def _build_tags(names: Iterable[str]) -> tuple[Tag, ...]:
    tags: dict[str, Tag] = {}
    for name in names:
        slug = slugify(name)
        if slug and slug not in tags:
            tags[slug] = Tag(slug=slug, name=name)
    return tuple(tags.values())


class DocumentLoader:
    """Reads every post under a content root into ``Document`` records.

    Implements the ``DocumentSource`` protocol.
    """

    def __init__(self, root: str | Path, extensions: Iterable[str] = CONTENT_EXTENSIONS) -> None:
        self._root = Path(root)
        self._extensions = tuple(ext.lower() for ext in extensions)

    @property
    def root(self) -> Path:
        return self._root

    async def load_all(self) -> list[Document]:
        files = await asyncio.to_thread(self.discover)
        if not files:
            logger.warning("No content files found under %s", self._root)
            return []

        results = await asyncio.gather(*(asyncio.to_thread(self._load_or_skip, rel) for rel in files))

        by_slug: dict[str, Document] = {}
        for doc in results:
            if doc is None:
                continue
            previous = by_slug.get(doc.slug)
            if previous is not None:
                logger.warning(
                    "Slug %r is defined by both %s and %s; keeping %s",
                    doc.slug,
                    previous.file_path,
                    doc.file_path,
                    doc.file_path,
                )
                del by_slug[doc.slug]
            by_slug[doc.slug] = doc

        logger.info("Loaded %d of %d content file(s) from %s", len(by_slug), len(files), self._root)
        return list(by_slug.values())

    def discover(self) -> list[str]:
        """Return the relative, ``/``-separated paths of all content files, sorted."""
        try:
            if not self._root.is_dir():
                raise LoadError(f"Content root {self._root} does not exist or is not a directory")
            os.listdir(self._root)
        except OSError as exc:
            raise LoadError(f"Content root {self._root} is not readable: {exc}") from exc

        def _on_error(exc: OSError) -> None:
            logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)

        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self._root, onerror=_on_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in filenames:
                path = Path(dirpath) / name
                if is_content_file(path, self._extensions):
                    found.append(path.relative_to(self._root).as_posix())
        return sorted(found)

    def load_file(self, relative_path: str) -> Document:
        """Parse one content file. Raises ``ParseError`` if its front-matter is invalid."""
        full_path = self._root / relative_path
        try:
            raw = full_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raw = full_path.read_bytes().decode("utf-8", errors="replace")

        data, body = split_front_matter(raw, relative_path)
        fm = validate_front_matter(PostFrontMatter, data, relative_path)

        rel = PurePosixPath(relative_path)
        slug = fm.slug.strip() if fm.slug else rel.stem
        if not slug:
            raise ParseError(relative_path, "empty slug")

        folder = str(rel.parent) if str(rel.parent) != "." else None
        category = _normalize_category(folder) or _normalize_category(fm.category)
        created_at, updated_at = _file_timestamps(full_path)

        return Document(
            id=slug,
            slug=slug,
            title=fm.title,
            excerpt=fm.excerpt,
            body=body,
            published=fm.published,
            published_at=fm.date,
            created_at=created_at,
            updated_at=updated_at,
            author=Author(
                id=slugify(fm.author.name),
                name=fm.author.name,
                avatar=fm.author.avatar,
                bio=fm.author.bio,
            ),
            tags=_build_tags(fm.tags),
            category=category,
            cover_image=fm.cover_image,
            featured=fm.featured,
            featured_order=fm.featured_order,
            reading_time=reading_time(body),
            reading_minutes=reading_minutes(body),
            file_path=relative_path,
        )

    def _load_or_skip(self, relative_path: str) -> Document | None:
        try:
            return self.load_file(relative_path)
        except ParseError as exc:
            logger.warning("Skipping %s: %s", exc.path, exc.reason)
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", relative_path, exc)
        return None
