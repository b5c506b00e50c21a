"""
Agro API

Aplicação principal FastAPI.
"""
import json
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agro_api.core.config import settings
from agro_api.core.exceptions import error_body, register_exception_handlers
from agro_api.core.logging_config import setup_logging, get_logger
from agro_api.middleware import LimitUploadSizeMiddleware, RequestLoggingMiddleware


# Inicializar logging estruturado ANTES de qualquer outra coisa
setup_logging()

log = get_logger(__name__)


class UTF8JSONResponse(JSONResponse):
    """JSONResponse que garante encoding UTF-8 ("Área Agricultável" sem escapes)."""
    media_type = "application/json; charset=utf-8"

    def render(self, content) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")


# =============================================================================
# LIFESPAN (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerencia ciclo de vida da aplicação."""
    log.info(
        "app_starting",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    if settings.DB_CREATE_TABLES:
        from agro_api.core.database import init_db
        await init_db()

    yield

    from agro_api.core.database import engine
    await engine.dispose()
    log.info("app_stopping")


# =============================================================================
# APP INSTANCE
# =============================================================================

def create_app() -> FastAPI:
    """Factory para criar a aplicação FastAPI."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
        ## API de Gestão de Produtores Rurais

        Cadastro de produtores, propriedades, safras e culturas plantadas.

        ### Funcionalidades

        - **Produtores**: CPF ou CNPJ validados pelos dígitos verificadores
        - **Propriedades**: área agricultável + vegetação nunca excede a área total
        - **Safras e Cultivos**: uma cultura por safra, sem duplicidade
        - **Dashboard**: totais, fazendas por estado, culturas e uso do solo
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        default_response_class=UTF8JSONResponse,
    )

    # CORS configurável via ALLOWED_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Request-ID"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response

    app.add_middleware(RequestLoggingMiddleware)

    # Adicionado por último = executado primeiro
    app.add_middleware(LimitUploadSizeMiddleware)

    register_exception_handlers(app)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        log.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return UTF8JSONResponse(
            status_code=500,
            content=error_body(
                "Internal server error",
                "internal_error",
                str(exc) if settings.DEBUG else None,
            ),
        )

    register_routes(app)

    return app


def register_routes(app: FastAPI):
    """Registra todos os routers da API."""
    from agro_api.api import crops, culture_types, producers, properties, seasons

    @app.get("/", tags=["Sistema"])
    async def root():
        """Informações básicas da API."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "online",
            "docs": "/docs",
        }

    @app.get("/health", tags=["Sistema"])
    async def health_check():
        """Verifica se a API está funcionando."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    @app.get("/health/detailed", tags=["Sistema"])
    async def health_check_detailed():
        """
        Verifica o banco de dados, incluindo métricas do pool de conexões.
        """
        from agro_api.core.database import check_db_health

        db_health = await check_db_health()

        return {
            "status": "healthy" if db_health["status"] == "healthy" else "degraded",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "checks": {"database": db_health},
        }

    # =========================================================================
    # API ROUTES
    # =========================================================================

    for module in (producers, properties, seasons, culture_types, crops):
        app.include_router(module.router, prefix=settings.API_PREFIX)


# =============================================================================
# APP INSTANCE
# =============================================================================

app = create_app()


# =============================================================================
# MAIN (para desenvolvimento)
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "agro_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
