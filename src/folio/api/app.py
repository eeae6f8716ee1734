from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from folio.api.lifespan import lifespan
from folio.api.routes.cache import router as cache_router
from folio.api.routes.health import router as health_router
from folio.api.routes.posts import router as posts_router
from folio.api.routes.projects import router as projects_router
from folio.api.routes.root import router as root_router
from folio.api.routes.taxonomy import router as taxonomy_router
from folio.exceptions import LoadError, RenderError


async def _render_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


async def _load_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(watch: bool = False) -> FastAPI:
    app = FastAPI(
        title="Folio API",
        description="Query, render and revalidate the posts of a markdown content tree.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.watch_content = watch

    app.add_exception_handler(RenderError, _render_error_handler)
    app.add_exception_handler(LoadError, _load_error_handler)

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(posts_router)
    app.include_router(taxonomy_router)
    app.include_router(projects_router)
    app.include_router(cache_router)

    return app
