from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from visitor_counter.api.dependencies import get_app_settings
from visitor_counter.config import Settings
from visitor_counter.observability.metrics import get_metrics

router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/metrics")
async def metrics(settings: Settings = Depends(get_app_settings)) -> dict:
    if not settings.enable_metrics_endpoint:
        raise HTTPException(status_code=404, detail="Not found")
    return get_metrics().snapshot()
