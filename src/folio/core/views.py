import threading


class ViewCounter:
    """Process-lifetime view counts keyed by document id.

    Counts are not persisted and start at zero after a restart.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, document_id: str) -> int:
        with self._lock:
            count = self._counts.get(document_id, 0) + 1
            self._counts[document_id] = count
            return count

    def get(self, document_id: str) -> int:
        return self._counts.get(document_id, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
