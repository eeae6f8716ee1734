import asyncio
import logging
from pathlib import Path

from folio.core.cache import CacheLayer
from folio.core.frontmatter import ProjectFrontMatter, split_front_matter, validate_front_matter
from folio.core.loader import CONTENT_EXTENSIONS, is_content_file
from folio.core.reading_time import reading_time
from folio.core.render import MarkdownRenderer
from folio.exceptions import ParseError
from folio.models import Project

logger = logging.getLogger(__name__)

PROJECTS_TAG = "projects"


class ProjectCatalog:
    """Portfolio pages kept as flat markdown files in one directory."""

    def __init__(
        self,
        root: str | Path,
        cache: CacheLayer,
        renderer: MarkdownRenderer,
        ttl_seconds: float = 3600,
    ) -> None:
        self._root = Path(root)
        self._cache = cache
        self._renderer = renderer
        self._ttl = ttl_seconds

    def slugs(self) -> list[str]:
        if not self._root.is_dir():
            logger.warning("Projects directory %s does not exist", self._root)
            return []
        return sorted({p.stem for p in self._root.iterdir() if p.is_file() and is_content_file(p)})

    async def get(self, slug: str) -> Project | None:
        """Load and render one project; ``None`` when it is missing or its front-matter is invalid."""
        return await self._cache.memoize(
            f"project:{slug}",
            self._ttl,
            (PROJECTS_TAG, f"project:{slug}"),
            lambda: self._load(slug),
        )

    async def all(self) -> list[Project]:
        """Every loadable project, newest first."""
        return list(await self._cache.memoize("projects:all", self._ttl, (PROJECTS_TAG,), self._load_all))

    def invalidate(self) -> int:
        return self._cache.invalidate(PROJECTS_TAG)

    async def _load_all(self) -> tuple[Project, ...]:
        projects = []
        for slug in await asyncio.to_thread(self.slugs):
            project = await self.get(slug)
            if project is not None:
                projects.append(project)
        projects.sort(key=lambda p: p.date, reverse=True)
        return tuple(projects)

    def _find(self, slug: str) -> Path | None:
        if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
            return None
        for ext in CONTENT_EXTENSIONS:
            candidate = self._root / f"{slug}{ext}"
            if candidate.is_file():
                return candidate
        return None

    async def _load(self, slug: str) -> Project | None:
        path = self._find(slug)
        if path is None:
            return None

        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable project %s: %s", path.name, exc)
            return None
        try:
            data, body = split_front_matter(raw, path.name)
            fm = validate_front_matter(ProjectFrontMatter, data, path.name)
        except ParseError as exc:
            logger.warning("Skipping project %s: %s", exc.path, exc.reason)
            return None

        return Project(
            slug=slug,
            title=fm.title,
            description=fm.description,
            date=fm.date,
            body=body,
            reading_time=reading_time(body),
            rendered=await self._renderer.render(body),
            tags=tuple(fm.tags),
            image=fm.image,
            github=fm.github,
            demo=fm.demo,
            featured=fm.featured,
            status=fm.status,
        )
