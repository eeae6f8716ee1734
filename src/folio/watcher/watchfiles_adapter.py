from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from folio.core.loader import is_content_file

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[set[Path]], Coroutine[Any, Any, None]]


def _content_changes(changes: set[tuple[Change, str]]) -> set[Path]:
    return {Path(p) for _, p in changes if is_content_file(Path(p))}


class WatchfilesWatcher:
    """Watch a content directory and report changed markdown files.

    Implements the ``ContentWatcherPort`` protocol.
    """

    def __init__(self, directory: str | Path, on_change: ChangeCallback) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return
        if not self._directory.is_dir():
            logger.warning("Not watching %s: directory does not exist", self._directory)
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for content changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = _content_changes(changes)
            if not paths:
                continue
            logger.info("Detected changes in %d content file(s) under %s", len(paths), self._directory)
            try:
                await self._on_change(paths)
            except Exception:
                logger.exception("Error in content watcher callback")
