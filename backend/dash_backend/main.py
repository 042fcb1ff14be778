"""Main FastAPI application for the DASH import backend."""
from fastapi import FastAPI

from dash_backend import __version__
from dash_backend.api.routes.jobs import router as jobs_router
from dash_backend.api.routes.plan_import import router as plan_import_router
from dash_backend.api.routes.plans import router as plans_router
from dash_backend.core.config import settings
from dash_backend.core.logging import configure_logging
from dash_backend.core.middleware import RequestIDMiddleware
from dash_backend.observability.client import init_opik

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version=__version__)
app.add_middleware(RequestIDMiddleware)
app.include_router(plan_import_router)
app.include_router(plans_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check() -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    return {"status": "ok"}
