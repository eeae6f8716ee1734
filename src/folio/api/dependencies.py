from __future__ import annotations

from collections.abc import AsyncIterator

from folio.config import Services, Settings, build_services, load_settings
from folio.core.index import ContentIndex
from folio.core.projects import ProjectCatalog

_settings: Settings | None = None
_services: Services | None = None


def configure(settings: Settings) -> None:
    """Use ``settings`` for the services created on first request."""
    global _settings, _services  # noqa: PLW0603
    _settings = settings
    _services = None


def get_settings() -> Settings:
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_services() -> Services:
    global _services  # noqa: PLW0603
    if _services is None:
        _services = build_services(get_settings())
    return _services


async def get_index() -> AsyncIterator[ContentIndex]:
    """Yield the process-wide ``ContentIndex``, creating it lazily on first call."""
    yield get_services().index


async def get_projects() -> AsyncIterator[ProjectCatalog]:
    yield get_services().projects


def shutdown_services() -> None:
    global _services  # noqa: PLW0603
    if _services is not None:
        _services.cache.clear()
        _services = None
