"""
Agro API - Cultivos (cultura plantada em uma safra)
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.api.pagination import list_params
from agro_api.core.database import get_db
from agro_api.models.schemas import (
    CropCreate,
    CropDetail,
    CropFilters,
    CropResponse,
    CropUpdate,
    PaginatedResponse,
    PaginationParams,
)
from agro_api.services.crop_service import CropService

router = APIRouter(prefix="/crops", tags=["Cultivos"])


@router.post("", response_model=CropDetail, status_code=status.HTTP_201_CREATED)
async def create_crop(data: CropCreate, db: AsyncSession = Depends(get_db)):
    """Registra um cultivo. O par (season_id, culture_type_id) é único."""
    return await CropService(db).create(data)


@router.get("", response_model=PaginatedResponse[CropResponse])
async def list_crops(
    params: PaginationParams = Depends(list_params(CropFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await CropService(db).list(params)
    return page.to_dict(CropResponse.model_validate)


@router.get("/by-season/{season_id}", response_model=PaginatedResponse[CropDetail])
async def list_crops_by_season(
    season_id: UUID,
    params: PaginationParams = Depends(list_params(CropFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await CropService(db).list_by_season(season_id, params)
    return page.to_dict(CropDetail.model_validate)


@router.get("/by-culture-type/{culture_type_id}", response_model=PaginatedResponse[CropDetail])
async def list_crops_by_culture_type(
    culture_type_id: UUID,
    params: PaginationParams = Depends(list_params(CropFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await CropService(db).list_by_culture_type(culture_type_id, params)
    return page.to_dict(CropDetail.model_validate)


@router.get("/{crop_id}", response_model=CropDetail)
async def get_crop(crop_id: UUID, db: AsyncSession = Depends(get_db)):
    return await CropService(db).get(crop_id)


@router.put("/{crop_id}", response_model=CropDetail)
async def update_crop(crop_id: UUID, data: CropUpdate, db: AsyncSession = Depends(get_db)):
    return await CropService(db).update(crop_id, data)


@router.delete("/{crop_id}", response_model=CropResponse)
async def delete_crop(crop_id: UUID, db: AsyncSession = Depends(get_db)):
    return await CropService(db).delete(crop_id)
