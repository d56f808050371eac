"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import admin, control, messaging, observability
from .routes.control import ISim


def create_fastapi_app(
    application: Application | None = None,
    sim: ISim | None = None,
    allow_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure FastAPI application around an Application instance."""
    if application is None:
        application = Application()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Manage application lifespan."""
        await application.start()
        if sim is not None and hasattr(sim, "set_tracker"):
            sim.set_tracker(application.tracker)
        yield
        if sim is not None:
            await sim.stop()
        await application.stop()

    fastapi_app = FastAPI(
        title="Support Desk API",
        description="Knowledge-base support chat with admin conversation analysis",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.application = application

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins or ["http://localhost:5173", "http://localhost:5174"],  # Vite default
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(messaging.create_messaging_router(application))
    fastapi_app.include_router(admin.create_admin_router(application))
    fastapi_app.include_router(observability.create_observability_router(application))
    fastapi_app.include_router(control.create_control_router(application, sim))

    return fastapi_app
