"""
Agro API - Produtores rurais
"""
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.api.pagination import list_params
from agro_api.core.database import get_db
from agro_api.models.schemas import (
    DashboardStats,
    PaginatedResponse,
    PaginationParams,
    ProducerCreate,
    ProducerDetail,
    ProducerFilters,
    ProducerResponse,
    ProducerUpdate,
)
from agro_api.services.dashboard_service import get_dashboard_stats
from agro_api.services.producer_service import ProducerService

router = APIRouter(prefix="/producers", tags=["Produtores"])


@router.post("", response_model=ProducerDetail, status_code=status.HTTP_201_CREATED)
async def create_producer(data: ProducerCreate, db: AsyncSession = Depends(get_db)):
    """
    Cadastra um produtor.

    O documento (CPF ou CNPJ) é validado pelos dígitos verificadores e
    armazenado apenas com dígitos.
    """
    return await ProducerService(db).create(data)


@router.get("", response_model=PaginatedResponse[ProducerResponse])
async def list_producers(
    params: PaginationParams = Depends(list_params(ProducerFilters)),
    db: AsyncSession = Depends(get_db),
):
    page = await ProducerService(db).list(params)
    return page.to_dict(ProducerResponse.model_validate)


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(db: AsyncSession = Depends(get_db)):
    """
    Totais de fazendas e hectares, fazendas por estado, cultivos por cultura
    e uso do solo.
    """
    return await get_dashboard_stats(db)


@router.get("/{producer_id}", response_model=ProducerDetail)
async def get_producer(producer_id: UUID, db: AsyncSession = Depends(get_db)):
    return await ProducerService(db).get(producer_id)


@router.put("/{producer_id}", response_model=ProducerDetail)
async def update_producer(producer_id: UUID, data: ProducerUpdate, db: AsyncSession = Depends(get_db)):
    return await ProducerService(db).update(producer_id, data)


@router.delete("/{producer_id}", response_model=ProducerResponse)
async def delete_producer(producer_id: UUID, db: AsyncSession = Depends(get_db)):
    """Remove o produtor e, em cascata, suas propriedades, safras e cultivos."""
    return await ProducerService(db).delete(producer_id)
