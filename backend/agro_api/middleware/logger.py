"""
Agro API - Request Logging Middleware

- request_id por request (reaproveita X-Request-ID do cliente quando válido)
- Binding ao contexto structlog via contextvars
- Headers X-Request-ID e X-Process-Time na resposta
- Um log por request, nível conforme o status
"""
import time
import uuid
from typing import Callable, Optional
from urllib.parse import unquote_plus

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from agro_api.core.logging_config import get_logger, mask_document

log = get_logger("agro_api.http")

MAX_REQUEST_ID_LENGTH = 64
MAX_QUERY_LOG_LENGTH = 200


def readable_query(query: str) -> Optional[str]:
    """
    Query string decodificada para o log.

    Decodifica antes de mascarar: em `%2211144477735%22` o CPF fica colado
    a outros dígitos e não seria reconhecido. Mascara antes de truncar.
    """
    return mask_document(unquote_plus(query))[:MAX_QUERY_LOG_LENGTH] or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Loga cada request com request_id, duração e status."""

    # Health checks e docs não geram log
    SKIP_PATHS = {"/health", "/health/", "/docs", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = self._request_id(request)
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=request.method,
            client_ip=self._get_client_ip(request),
        )

        should_log = path not in self.SKIP_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            if should_log:
                log.error(
                    "request_failed",
                    duration_ms=self._elapsed_ms(start_time),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            raise

        duration_ms = self._elapsed_ms(start_time)

        if should_log:
            status_code = response.status_code
            log_method = log.info if status_code < 400 else log.warning if status_code < 500 else log.error
            log_method(
                "request_completed",
                status_code=status_code,
                duration_ms=duration_ms,
                query=readable_query(request.url.query),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms}ms"
        return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)

    @staticmethod
    def _request_id(request: Request) -> str:
        incoming = request.headers.get("x-request-id", "").strip()
        if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH and incoming.isprintable():
            return incoming
        return str(uuid.uuid4())

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """IP do cliente, considerando proxies (X-Forwarded-For / X-Real-IP)."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"
