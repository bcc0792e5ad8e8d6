import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oceanview.api.v1.api import api_router
from oceanview.core.config import settings
from oceanview.core.logging import configure_logging
from oceanview.storage.base import Storage

logger = logging.getLogger(__name__)

# CORS: use CORS_ORIGINS from env in production; default to the local dev servers
_default_origins = [
    "http://127.0.0.1:5173", "http://localhost:5173",
    "http://127.0.0.1:3000", "http://localhost:3000",
]


def create_app(storage: Storage | None = None) -> FastAPI:
    """Build the API around ``storage``; without one, the configured backend is created (and seeded if asked)."""
    app = FastAPI(title=settings.APP_NAME)

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if storage is None:
        from oceanview.storage.factory import build_storage

        storage = build_storage(settings)
        if settings.SEED_SAMPLE_DATA and settings.STORAGE_BACKEND == "memory":
            from oceanview import seed

            seed.run(storage)
    app.state.storage = storage

    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def _build_default_app() -> FastAPI:
    configure_logging()
    return create_app()


# uvicorn oceanview.main:app
app = _build_default_app()
