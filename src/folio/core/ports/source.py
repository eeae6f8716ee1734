from typing import Protocol

from folio.models import Document


class DocumentSource(Protocol):
    async def load_all(self) -> list[Document]: ...
