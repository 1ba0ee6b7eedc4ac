"""Axiom API logging middleware.

Ships one structured event per API call to Axiom: surface (admin/app),
method, path, query, masked request body, status code, duration and, for
failures, the error detail the caller received (e.g. "Assignment is not
pending your approval"). Pass-through when Axiom is not configured.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shopshift.config import settings

logger = logging.getLogger(__name__)

# Fields masked in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_SURFACES = {"/api/v1/admin": "admin", "/api/v1/app": "app"}

_MAX_DETAIL_LEN = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """Recursively mask sensitive keys; lists are capped at 20 items."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


def _surface(path: str) -> str:
    for prefix, name in _SURFACES.items():
        if path.startswith(prefix):
            return name
    return "other"


async def _read_json_body(request: Request) -> Any:
    """Masked JSON body of a write request, or None."""
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    body_bytes: bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return _mask(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


async def _drain_error(response: Response) -> tuple[Response, str]:
    """Read an error response's detail and rebuild the consumed response."""
    body: bytes = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        data: Any = json.loads(body)
        value: Any = data.get("detail", data) if isinstance(data, dict) else data
        detail: str = value if isinstance(value, str) else json.dumps(value)
    except (json.JSONDecodeError, UnicodeDecodeError):
        detail = body.decode("utf-8", errors="replace")

    rebuilt = Response(
        content=body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return rebuilt, detail[:_MAX_DETAIL_LEN]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs every API request and response to Axiom."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.time()
        event: dict[str, Any] = {
            "surface": _surface(request.url.path),
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        request_body: Any = await _read_json_body(request)
        if request_body is not None:
            event["request_body"] = request_body

        try:
            response: Response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                response, event["error"] = await _drain_error(response)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.time() - started) * 1000, 2)
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        # A logging failure must never fail the request itself
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
