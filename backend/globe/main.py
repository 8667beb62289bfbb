"""
Main application module for the globe flight backend.

This file sets up the FastAPI application, configures CORS so the
frontend can make cross-origin requests, mounts the static frontend
files when they exist, and exposes a simple health check endpoint.

Routers for sessions, camera gestures and the surface texture are
included under the `/api` namespace.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.routes_camera import router as camera_router
from .api.routes_sessions import router as sessions_router
from .api.routes_surface import router as surface_router
from .services.texture_store import init_db


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="Globe Flight Tracker")

    # Create the texture cache index before serving requests.  init_db is
    # idempotent.
    @app.on_event("startup")  # type: ignore[misc]
    async def startup_event() -> None:
        init_db()

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(sessions_router, prefix="/api", tags=["sessions"])
    app.include_router(camera_router, prefix="/api", tags=["camera"])
    app.include_router(surface_router, prefix="/api", tags=["surface"])

    # Serve the browser client from <repo>/frontend when it is present.
    frontend_dir = Path(__file__).resolve().parents[2] / "frontend"
    if frontend_dir.exists():
        app.mount(
            "/",
            StaticFiles(directory=str(frontend_dir), html=True),
            name="frontend",
        )

    return app


# Create the application instance.  Uvicorn imports this when running
# `uvicorn globe.main:app` from within backend/
app = create_app()
