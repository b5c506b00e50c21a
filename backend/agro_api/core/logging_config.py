"""
Agro API - Logging estruturado (structlog)

JSON em produção, console colorido com DEBUG=true. Todo evento passa pelo
mascaramento de CPF/CNPJ antes de ser renderizado: documentos de produtores
nunca vão inteiros para o log.
"""
import logging
import re
import sys
from typing import Any, Dict

import structlog
from structlog.types import Processor

from agro_api.core.config import settings


# =============================================================================
# MASCARAMENTO
# =============================================================================

MASK = "***MASKED***"

# CPF/CNPJ (com ou sem pontuação): preserva só os dígitos das pontas
DOCUMENT_PATTERNS = [
    (re.compile(r'\b(\d{2})\.?\d{3}\.?\d{3}/?\d{4}-?(\d{2})\b'), r'\1.***.***/****-\2'),
    (re.compile(r'\b(\d{3})\.?\d{3}\.?\d{3}-?(\d{2})\b'), r'\1.***.***-\2'),
]

# Senha embutida na DATABASE_URL (erros de conexão costumam repeti-la)
DSN_PASSWORD = re.compile(r'(\w[\w+.-]*://[^:/@\s]+:)[^@\s]+@')

MASKED_KEYS = {"password", "database_url"}


def mask_document(value: str) -> str:
    """Mascara CPF/CNPJ mantendo apenas os dígitos das pontas."""
    for pattern, replacement in DOCUMENT_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def _mask(value: Any) -> Any:
    if isinstance(value, str):
        return DSN_PASSWORD.sub(r'\1' + MASK + '@', mask_document(value))
    if isinstance(value, dict):
        return {k: MASK if str(k).lower() in MASKED_KEYS else _mask(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_mask(item) for item in value]
    return value


def mask_sensitive_data(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Processor structlog: aplica o mascaramento em todos os campos do evento."""
    return _mask(event_dict)


# =============================================================================
# CONTEXTO E FORMATO
# =============================================================================

LEADING_KEYS = (
    "timestamp", "level", "event", "request_id", "method", "path",
    "status_code", "duration_ms",
)


def add_app_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict.setdefault("app", settings.APP_NAME)
    event_dict.setdefault("version", settings.APP_VERSION)
    return event_dict


def order_keys(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Campos de correlação primeiro, o resto em ordem alfabética."""
    ordered = {key: event_dict.pop(key) for key in LEADING_KEYS if key in event_dict}
    ordered.update(sorted(event_dict.items()))
    return ordered


def get_log_level() -> int:
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_structlog() -> None:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,  # request_id, path, method
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        mask_sensitive_data,
    ]

    if settings.DEBUG:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            order_keys,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_uvicorn_logging() -> None:
    """Loggers do uvicorn no stdout, no mesmo nível da aplicação."""
    level = get_log_level()
    fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Uso:
        log = get_logger(__name__)
        log.info("property_created", property_id=str(prop.id))
    """
    return structlog.get_logger(name)


def setup_logging() -> None:
    """Chamado uma vez, na importação de agro_api.main."""
    configure_structlog()
    configure_uvicorn_logging()

    get_logger("agro_api.startup").info(
        "logging_configured",
        level=logging.getLevelName(get_log_level()),
        renderer="console" if settings.DEBUG else "json",
    )
