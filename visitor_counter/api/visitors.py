from __future__ import annotations

from typing import Any, Callable

import structlog
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from visitor_counter.api.dependencies import get_app_settings, get_clock, get_store_provider
from visitor_counter.config import Settings
from visitor_counter.errors import PersistenceNotConfiguredError
from visitor_counter.models.schemas import VisitStatsResponse
from visitor_counter.observability.metrics import get_metrics
from visitor_counter.observability.store import instrument_visit
from visitor_counter.services.counter import should_increment
from visitor_counter.services.identity import CLIENT_ID_HEADER, resolve_client_id
from visitor_counter.services.visit_service import record_visit
from visitor_counter.storage.provider import VisitStoreProvider

router = APIRouter(prefix="/api", tags=["visitors"])
logger = structlog.get_logger(__name__)

_ZEROED: dict[str, Any] = {"totalVisits": 0, "activeUsers": 0}


def _error_response(status_code: int, error: str, extra: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


@router.get(
    "/visitors",
    response_model=VisitStatsResponse,
    responses={500: {"description": "Store failure"}, 503: {"description": "Persistence not configured"}},
)
def get_visitors(
    x_client_id: str | None = Header(default=None),
    x_update_total: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
    provider: VisitStoreProvider = Depends(get_store_provider),
    clock: Callable[[], int] = Depends(get_clock),
) -> JSONResponse:
    try:
        store = provider.get()
    except PersistenceNotConfiguredError:
        # Already logged once by the provider.
        return _error_response(503, "Persistence is not configured", _ZEROED)
    except Exception:
        get_metrics().observe_store_failure()
        logger.exception("store.unavailable", backend=settings.storage_backend)
        return _error_response(500, "Internal Server Error", _ZEROED)

    client_id, _ = resolve_client_id(x_client_id)
    counted = should_increment(settings.visit_increment_policy, x_update_total)

    try:
        snapshot = instrument_visit(
            backend=settings.storage_backend,
            counted=counted,
            fn=lambda: record_visit(
                store,
                client_id=client_id,
                now=clock(),
                count_visit=counted,
                threshold_ms=settings.inactivity_threshold_ms,
            ),
        )
    except Exception:
        return _error_response(500, "Internal Server Error", store.failure_payload)

    body = VisitStatsResponse(
        total_visits=snapshot.total_visits,
        active_users=snapshot.active_users,
        client_id=snapshot.client_id,
    )
    return JSONResponse(content=body.model_dump(by_alias=True), headers={CLIENT_ID_HEADER: client_id})
