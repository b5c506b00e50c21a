"""
Agro API - Limite de tamanho do corpo

Rejeita com 413 requests cujo Content-Length excede MAX_UPLOAD_SIZE.
O body não é lido aqui.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from agro_api.core.config import settings
from agro_api.core.exceptions import error_body
from agro_api.core.logging_config import get_logger

log = get_logger(__name__)

BODYLESS_METHODS = {"GET", "HEAD", "OPTIONS", "DELETE"}


class LimitUploadSizeMiddleware(BaseHTTPMiddleware):
    """Limita o corpo de POST/PUT via header Content-Length."""

    def __init__(self, app, max_size: int = None):
        super().__init__(app)
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE

    async def dispatch(self, request: Request, call_next):
        if request.method in BODYLESS_METHODS:
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if not content_length or not content_length.isdigit():
            # Sem header (ou inválido): o framework decide
            return await call_next(request)

        length = int(content_length)
        if length > self.max_size:
            log.warning(
                "payload_too_large",
                content_length=length,
                max_size=self.max_size,
                path=request.url.path,
            )
            max_kb = self.max_size / 1024
            return JSONResponse(
                status_code=413,
                content=error_body(
                    f"Payload too large. Maximum size: {max_kb:.0f} KB",
                    "payload_too_large",
                ),
            )

        return await call_next(request)
