from typing import Annotated

import typer

from folio.cli.common import console, err_console

serve_app = typer.Typer(help="Start servers.")


@serve_app.command("api")
def api(
    host: str = "127.0.0.1",
    port: int = 8000,
    watch: Annotated[bool, typer.Option(help="Revalidate caches when content files change.")] = False,
) -> None:
    """Start the FastAPI JSON API server."""
    import uvicorn

    from folio.api.app import create_app

    app = create_app(watch=watch)
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port, log_config=None)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    from folio.cli.common import get_index
    from folio.mcp.server import create_mcp_server

    server = create_mcp_server(get_index())
    err_console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
