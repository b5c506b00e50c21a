"""
Agro API - Parâmetros de listagem

Dependency que lê page, page_size, order_by, order e filters (objeto JSON
na query string) e valida os filtros com o schema do recurso.

Exemplo:
    GET /api/v1/seasons?page=1&page_size=20&order_by=year&order=desc&filters={"year":2024}
"""
import json
from typing import Callable, Optional, Type

from fastapi import Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from agro_api.core.config import settings
from agro_api.models.schemas import PaginationParams, SortOrder


def _filters_error(message: str, loc: tuple = ()) -> RequestValidationError:
    return RequestValidationError([
        {"loc": ("query", "filters", *loc), "msg": message, "type": "value_error"}
    ])


def parse_filters(raw: Optional[str], schema: Type[BaseModel]) -> dict:
    """JSON da query string -> dict validado (sem chaves nulas)."""
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise _filters_error("filters must be a valid JSON object")

    if not isinstance(data, dict):
        raise _filters_error("filters must be a valid JSON object")

    try:
        parsed = schema.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError([
            {"loc": ("query", "filters", *err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ])

    return parsed.model_dump(exclude_none=True)


def list_params(filters_schema: Type[BaseModel]) -> Callable[..., PaginationParams]:
    """Cria a dependency de listagem para um schema de filtros."""

    def dependency(
        page: int = Query(1, ge=1, description="Página (começa em 1)"),
        page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, description="Itens por página"),
        order_by: Optional[str] = Query(None, description="Coluna de ordenação"),
        order: SortOrder = Query(SortOrder.ASC),
        filters: Optional[str] = Query(None, description="Filtros em JSON"),
    ) -> PaginationParams:
        return PaginationParams(
            page=page,
            page_size=min(page_size, settings.MAX_PAGE_SIZE),
            order_by=order_by,
            order=order,
            filters=parse_filters(filters, filters_schema),
        )

    return dependency
