"""
Agro API - Listagem paginada

Filtros, ordenação por uma coluna e paginação skip/take usados por todos
os services de recurso.
"""
import math
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.core.exceptions import BadRequestError
from agro_api.models.database import Base
from agro_api.models.schemas import PaginationParams, SortOrder

T = TypeVar("T")


class Page(Generic[T]):
    """Resultado de uma listagem paginada."""

    def __init__(self, items: List[T], total: int, page: int, page_size: int):
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    def to_dict(self, serializer=None) -> dict:
        items = [serializer(item) for item in self.items] if serializer else self.items
        return {
            "items": items,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "pages": self.pages,
        }


def contains(column, value: str) -> ColumnElement:
    """Substring case-insensitive (ILIKE %valor%)."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def order_clause(model: Type[Base], params: PaginationParams) -> Sequence[Any]:
    """
    Ordenação pedida pelo cliente, com desempate por id.

    Sem order_by, ordena por created_at.
    """
    columns = model.__table__.columns
    if params.order_by is None:
        return [columns["created_at"].asc(), columns["id"].asc()]

    if params.order_by not in columns:
        raise BadRequestError(f"Invalid order column: {params.order_by}")

    column = columns[params.order_by]
    direction = column.desc() if params.order == SortOrder.DESC else column.asc()
    return [direction, columns["id"].asc()]


async def paginate(
    db: AsyncSession,
    model: Type[Base],
    params: PaginationParams,
    conditions: Iterable[ColumnElement] = (),
    options: Iterable[Any] = (),
    order_by: Optional[Sequence[Any]] = None,
) -> Page:
    """
    Executa a listagem e a contagem com os mesmos filtros.

    Args:
        model: Modelo ORM listado
        params: Página, tamanho, ordenação
        conditions: Cláusulas WHERE já montadas pelo service
        options: Loader options (selectinload) para projeções
        order_by: Ordenação padrão do service quando o cliente não pede uma
    """
    conditions = list(conditions)

    if params.order_by is None and order_by is not None:
        ordering = list(order_by)
    else:
        ordering = order_clause(model, params)

    query = (
        select(model)
        .where(*conditions)
        .options(*options)
        .order_by(*ordering)
        .offset(params.offset)
        .limit(params.page_size)
    )
    count_query = select(func.count()).select_from(model).where(*conditions)

    items = list((await db.execute(query)).scalars().all())
    total = (await db.execute(count_query)).scalar_one()

    return Page(items, total, params.page, params.page_size)
