"""FastAPI application factory for the document intake API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adminia.api.container import ServiceContainer
from adminia.api.errors import register_exception_handlers
from adminia.api.routes.documents import router as documents_router
from adminia.api.routes.meta import router as meta_router
from adminia.api.routes.objects import router as objects_router
from adminia.storage.paths import OBJECTS_PREFIX


def create_app(container: ServiceContainer) -> FastAPI:
    """Build the application around explicitly constructed services."""
    app = FastAPI(title="AdminIA", version="0.1.0")
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = container.settings.api_prefix.rstrip("/")
    app.include_router(documents_router, prefix=f"{prefix}/documents", tags=["documents"])
    app.include_router(meta_router, prefix=prefix, tags=["meta"])
    app.include_router(objects_router, prefix=OBJECTS_PREFIX.rstrip("/"), tags=["objects"])
    register_exception_handlers(app)

    @app.get("/health")
    def healthcheck() -> dict[str, str]:
        """Healthcheck endpoint for monitoring."""
        return {"status": "ok"}

    return app
