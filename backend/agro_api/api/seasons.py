"""
Agro API - Safras
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.api.pagination import list_params
from agro_api.core.database import get_db
from agro_api.models.schemas import (
    PaginatedResponse,
    PaginationParams,
    SeasonCreate,
    SeasonDetail,
    SeasonFilters,
    SeasonListItem,
    SeasonResponse,
    SeasonUpdate,
)
from agro_api.services.season_service import SeasonService

router = APIRouter(prefix="/seasons", tags=["Safras"])


@router.post("", response_model=SeasonDetail, status_code=status.HTTP_201_CREATED)
async def create_season(data: SeasonCreate, db: AsyncSession = Depends(get_db)):
    """Cria uma safra. (property_id, name, year) não pode se repetir."""
    return await SeasonService(db).create(data)


@router.get("", response_model=PaginatedResponse[SeasonResponse])
async def list_seasons(
    params: PaginationParams = Depends(list_params(SeasonFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await SeasonService(db).list(params)
    return page.to_dict(SeasonResponse.model_validate)


@router.get("/property/{property_id}", response_model=PaginatedResponse[SeasonListItem])
async def list_seasons_by_property(
    property_id: UUID,
    params: PaginationParams = Depends(list_params(SeasonFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await SeasonService(db).list_by_property(property_id, params)
    return page.to_dict(SeasonListItem.model_validate)


@router.get("/{season_id}", response_model=SeasonDetail)
async def get_season(season_id: UUID, db: AsyncSession = Depends(get_db)):
    return await SeasonService(db).get(season_id)


@router.put("/{season_id}", response_model=SeasonDetail)
async def update_season(season_id: UUID, data: SeasonUpdate, db: AsyncSession = Depends(get_db)):
    return await SeasonService(db).update(season_id, data)


@router.delete("/{season_id}", response_model=SeasonResponse)
async def delete_season(season_id: UUID, db: AsyncSession = Depends(get_db)):
    return await SeasonService(db).delete(season_id)
