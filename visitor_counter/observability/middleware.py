from __future__ import annotations

import uuid
from collections.abc import Iterable
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from visitor_counter.observability.metrics import get_metrics

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware:
    """Binds request_id/path/method (and the caller's client id) for logs, emits
    one access event per request, and feeds the HTTP request metrics."""

    def __init__(self, app: Callable[..., Any], excluded_metric_paths: Iterable[str] = ("/api/metrics",)) -> None:
        self.app = app
        self._excluded_metric_paths = frozenset(excluded_metric_paths)

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path")
        context: dict[str, Any] = {"request_id": request_id, "path": path, "method": scope.get("method")}
        client_id = Headers(scope=scope).get("x-client-id")
        if client_id:
            context["client_id"] = client_id
        structlog.contextvars.bind_contextvars(**context)

        start = perf_counter()
        status_code = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code, client_id
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
                # Ids issued by the route only appear on the response.
                client_id = headers.get("x-client-id") or client_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            if path not in self._excluded_metric_paths:
                get_metrics().observe_http_request(elapsed_ms=elapsed_ms)

            access: dict[str, Any] = {"status_code": status_code, "elapsed_ms": round(elapsed_ms, 2)}
            if client_id:
                access["client_id"] = client_id
            structlog.get_logger("access").info("http_request", **access)
            structlog.contextvars.clear_contextvars()
