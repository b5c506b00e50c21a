"""
Agro API - Tipos de cultura
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.api.pagination import list_params
from agro_api.core.database import get_db
from agro_api.models.schemas import (
    CultureTypeCreate,
    CultureTypeDetail,
    CultureTypeFilters,
    CultureTypeResponse,
    CultureTypeUpdate,
    PaginatedResponse,
    PaginationParams,
)
from agro_api.services.culture_type_service import CultureTypeService

router = APIRouter(prefix="/culture-types", tags=["Tipos de Cultura"])


@router.post("", response_model=CultureTypeDetail, status_code=status.HTTP_201_CREATED)
async def create_culture_type(data: CultureTypeCreate, db: AsyncSession = Depends(get_db)):
    return await CultureTypeService(db).create(data)


@router.get("", response_model=PaginatedResponse[CultureTypeDetail])
async def list_culture_types(
    params: PaginationParams = Depends(list_params(CultureTypeFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await CultureTypeService(db).list(params)
    return page.to_dict(CultureTypeDetail.model_validate)


@router.get("/{culture_type_id}", response_model=CultureTypeDetail)
async def get_culture_type(culture_type_id: UUID, db: AsyncSession = Depends(get_db)):
    return await CultureTypeService(db).get(culture_type_id)


@router.put("/{culture_type_id}", response_model=CultureTypeDetail)
async def update_culture_type(
    culture_type_id: UUID,
    data: CultureTypeUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await CultureTypeService(db).update(culture_type_id, data)


@router.delete("/{culture_type_id}", response_model=CultureTypeResponse)
async def delete_culture_type(culture_type_id: UUID, db: AsyncSession = Depends(get_db)):
    """Remove o tipo de cultura. Recusado (400) se houver cultivos usando o tipo."""
    return await CultureTypeService(db).delete(culture_type_id)
