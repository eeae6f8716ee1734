from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from folio.config import build_index, load_settings
from folio.core.index import ContentIndex

console = Console()
err_console = Console(stderr=True)


def render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]], footer: str | None = None) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row))
    console.print(table)
    console.print(footer or f"({len(rows)} rows)")


def get_index() -> ContentIndex:
    return build_index(load_settings())
