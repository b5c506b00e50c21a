"""
Agro API - Exceções de domínio e handlers HTTP

Services levantam NotFoundError / BadRequestError; os handlers registrados
no app convertem para o envelope de erro padrão (ErrorResponse).
"""
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from agro_api.core.logging_config import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Erro de negócio com status HTTP associado."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "bad_request"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(AppError):
    """Id não corresponde a nenhum registro."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class BadRequestError(AppError):
    """Regra de negócio violada (documento, área, unicidade, FK, exclusão)."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"


def error_body(message: str, code: str, detail: Optional[Any] = None) -> dict:
    return {
        "success": False,
        "error": message,
        "code": code,
        "detail": detail,
    }


def format_validation_errors(errors: List[dict]) -> List[dict]:
    """Converte erros do pydantic em [{field, message}]."""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg", "Invalid value"),
        })
    return formatted


def register_exception_handlers(app: FastAPI) -> None:
    """Registra os handlers de erro no app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log.info(
            "request_rejected",
            code=exc.code,
            error=exc.message,
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        detail = format_validation_errors(exc.errors())
        log.info("request_validation_failed", errors=len(detail))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Validation failed", "validation_error", detail),
        )
