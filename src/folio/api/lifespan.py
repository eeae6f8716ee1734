from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from folio.api.dependencies import get_services, get_settings, shutdown_services
from folio.core.ports.watcher import ContentWatcherPort
from folio.watcher.watchfiles_adapter import WatchfilesWatcher


def _content_watchers() -> list[ContentWatcherPort]:
    settings = get_settings()
    services = get_services()

    async def _refresh_posts(paths: set[Path]) -> None:
        services.index.refresh()

    async def _refresh_projects(paths: set[Path]) -> None:
        services.projects.invalidate()

    return [
        WatchfilesWatcher(settings.content_dir, _refresh_posts),
        WatchfilesWatcher(settings.projects_dir, _refresh_projects),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    watchers: list[ContentWatcherPort] = _content_watchers() if getattr(app.state, "watch_content", False) else []
    for watcher in watchers:
        await watcher.start()
    try:
        yield
    finally:
        for watcher in watchers:
            await watcher.stop()
        shutdown_services()
