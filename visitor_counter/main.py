from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from visitor_counter.api.metrics import router as metrics_router
from visitor_counter.api.visitors import router as visitors_router
from visitor_counter.config import Settings, get_settings
from visitor_counter.errors import PersistenceError, PersistenceNotConfiguredError
from visitor_counter.observability.logging import configure_logging
from visitor_counter.observability.middleware import RequestContextMiddleware
from visitor_counter.services.identity import CLIENT_ID_HEADER
from visitor_counter.storage.base import VisitStore
from visitor_counter.storage.provider import VisitStoreProvider


def create_app(settings: Settings | None = None, store: VisitStore | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(title="Visitor Counter", version="0.1.0")
    application.state.settings = settings
    application.state.store_provider = VisitStoreProvider(settings, store=store)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[CLIENT_ID_HEADER, "X-Request-ID"],
    )
    application.add_middleware(RequestContextMiddleware)

    application.include_router(visitors_router)
    application.include_router(metrics_router)

    @application.on_event("startup")
    def _startup() -> None:
        # Surface store problems at boot; requests keep answering 503/500.
        try:
            application.state.store_provider.get()
        except PersistenceNotConfiguredError:
            return  # logged by the provider
        except PersistenceError as exc:
            structlog.get_logger(__name__).warning("store.startup_failed", error=str(exc))

    @application.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
