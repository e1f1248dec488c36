from __future__ import annotations

from typing import Callable

from fastapi import Request

from visitor_counter.config import Settings
from visitor_counter.services.visit_service import now_ms
from visitor_counter.storage.provider import VisitStoreProvider


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store_provider(request: Request) -> VisitStoreProvider:
    return request.app.state.store_provider


def get_clock() -> Callable[[], int]:
    return now_ms
