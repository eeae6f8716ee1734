from typing import Protocol


class ViewCounterPort(Protocol):
    def increment(self, document_id: str) -> int: ...

    def get(self, document_id: str) -> int: ...
