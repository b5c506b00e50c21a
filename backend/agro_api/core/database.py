"""
Agro API - Database Connection

Configuração resiliente com:
- Connection pooling otimizado (configurável via env)
- Timeouts no nível do driver asyncpg
- Health checks de conexão (pool_pre_ping)
- Foreign keys habilitadas no SQLite (ON DELETE CASCADE)
"""
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from agro_api.core.config import settings
from agro_api.core.logging_config import get_logger

log = get_logger(__name__)


# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

# Configurações de timeout para asyncpg (driver-level)
ASYNCPG_CONNECT_ARGS = {
    "command_timeout": settings.DB_COMMAND_TIMEOUT,
    "server_settings": {
        "statement_timeout": str(settings.DB_COMMAND_TIMEOUT * 1000),  # ms
    },
}


def _engine_options(url: str) -> Dict[str, Any]:
    """Opções do engine de acordo com o driver da URL."""
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}

    return {
        "echo": settings.DEBUG,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        # Verifica conexão antes de usar (detecta conexões mortas)
        "pool_pre_ping": True,
        "connect_args": ASYNCPG_CONNECT_ARGS,
    }


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite só aplica ON DELETE CASCADE com PRAGMA foreign_keys=ON."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """Cria um engine assíncrono para a URL informada."""
    options = _engine_options(url)
    options.update(overrides)
    async_engine = create_async_engine(url, **options)
    if url.startswith("sqlite"):
        enable_sqlite_foreign_keys(async_engine)
    return async_engine


engine = build_engine(settings.DATABASE_URL)

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency que fornece uma sessão de banco de dados.

    Commit ao final do request; rollback em qualquer exceção.

    Uso com FastAPI:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            log.warning("db_session_rollback", error=str(e))
            raise
        finally:
            await session.close()


# =============================================================================
# HEALTH CHECK
# =============================================================================

async def check_db_health() -> dict:
    """
    Verifica saúde do banco de dados.
    Retorna status e métricas do pool (quando o pool expõe métricas).
    """
    from sqlalchemy import text

    try:
        async with async_session_maker() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()

        health = {"status": "healthy"}
        pool = engine.pool
        if hasattr(pool, "checkedout"):
            health.update(
                pool_size=pool.size(),
                checked_in=pool.checkedin(),
                checked_out=pool.checkedout(),
                overflow=pool.overflow(),
            )
        return health
    except Exception as e:
        log.error("db_health_check_failed", error=str(e))
        return {
            "status": "unhealthy",
            "error": str(e),
        }


# =============================================================================
# INITIALIZATION
# =============================================================================

async def init_db(target: AsyncEngine = None):
    """
    Cria as tabelas que ainda não existem.
    """
    from agro_api.models.database import Base

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    log.info("db_initialized")
