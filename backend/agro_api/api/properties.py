"""
Agro API - Propriedades rurais
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.api.pagination import list_params
from agro_api.core.database import get_db
from agro_api.models.schemas import (
    AttachCultureRequest,
    PaginatedResponse,
    PaginationParams,
    ProducerPropertyItem,
    PropertyCreate,
    PropertyDetail,
    PropertyFilters,
    PropertyResponse,
    PropertyUpdate,
)
from agro_api.services.property_service import PropertyService

router = APIRouter(prefix="/properties", tags=["Propriedades"])


@router.post("", response_model=PropertyDetail, status_code=status.HTTP_201_CREATED)
async def create_property(data: PropertyCreate, db: AsyncSession = Depends(get_db)):
    """
    Cadastra uma propriedade.

    Regras:
    - Nenhuma área negativa
    - arable_area + vegetation_area <= total_area
    - producer_id precisa existir
    """
    return await PropertyService(db).create(data)


@router.get("", response_model=PaginatedResponse[PropertyResponse])
async def list_properties(
    params: PaginationParams = Depends(list_params(PropertyFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await PropertyService(db).list(params)
    return page.to_dict(PropertyResponse.model_validate)


@router.get("/producer/{producer_id}", response_model=PaginatedResponse[ProducerPropertyItem])
async def list_properties_by_producer(
    producer_id: UUID,
    params: PaginationParams = Depends(list_params(PropertyFilters)),
    db: AsyncSession = Depends(get_db),
):
    """Propriedades do produtor, mais recentes primeiro, com safras e cultivos."""
    page = await PropertyService(db).list_by_producer(producer_id, params)
    return page.to_dict(ProducerPropertyItem.model_validate)


@router.get("/{property_id}", response_model=PropertyDetail)
async def get_property(property_id: UUID, db: AsyncSession = Depends(get_db)):
    return await PropertyService(db).get(property_id)


@router.put("/{property_id}", response_model=PropertyDetail)
async def update_property(property_id: UUID, data: PropertyUpdate, db: AsyncSession = Depends(get_db)):
    """
    Atualiza a propriedade.

    As regras de área valem para o resultado final: campos ausentes assumem o
    valor já salvo.
    """
    return await PropertyService(db).update(property_id, data)


@router.delete("/{property_id}", response_model=PropertyResponse)
async def delete_property(property_id: UUID, db: AsyncSession = Depends(get_db)):
    return await PropertyService(db).delete(property_id)


@router.post(
    "/{property_id}/cultures",
    response_model=PropertyDetail,
    status_code=status.HTTP_201_CREATED,
)
async def attach_culture(
    property_id: UUID,
    data: AttachCultureRequest,
    db: AsyncSession = Depends(get_db),
):
    """Registra um tipo de cultura como já plantado na propriedade."""
    return await PropertyService(db).attach_culture(property_id, data.culture_type_id)
