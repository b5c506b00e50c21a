"""
Agro API - Guards de integridade

Checagens feitas antes de cada escrita:
- Existência de chaves estrangeiras (referência pendente = 400, não erro de FK)
- Unicidade de chaves naturais (excluindo o próprio registro no update)

As constraints do banco continuam sendo a garantia final: um IntegrityError
na escrita vira o mesmo BadRequestError.
"""
from typing import Any, Optional, Type
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.core.exceptions import BadRequestError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Base

log = get_logger(__name__)


async def ensure_exists(db: AsyncSession, model: Type[Base], entity_id: UUID, message: str) -> Any:
    """Retorna o registro referenciado ou levanta BadRequestError."""
    instance = await db.get(model, entity_id)
    if instance is None:
        raise BadRequestError(message)
    return instance


async def ensure_available(
    db: AsyncSession,
    model: Type[Base],
    message: str,
    exclude_id: Optional[UUID] = None,
    **natural_key: Any,
) -> None:
    """
    Levanta BadRequestError se já existir registro com a chave natural.

    Args:
        model: Modelo ORM
        message: Mensagem do erro de conflito
        exclude_id: Id do próprio registro (update)
        natural_key: Colunas e valores da chave natural
    """
    query = select(func.count()).select_from(model).filter_by(**natural_key)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)

    result = await db.execute(query)
    if result.scalar_one() > 0:
        log.info(
            "uniqueness_conflict",
            entity=model.__tablename__,
            fields=sorted(natural_key.keys()),
        )
        raise BadRequestError(message)


async def flush_or_conflict(db: AsyncSession, message: str) -> None:
    """
    Envia as escritas pendentes; violação de constraint vira BadRequestError.

    Cobre a corrida entre a checagem e a escrita de dois requests simultâneos.
    O rollback fica a cargo da dependency get_db.
    """
    try:
        await db.flush()
    except IntegrityError as e:
        log.warning("integrity_error_on_write", error=str(e.orig))
        raise BadRequestError(message) from e
