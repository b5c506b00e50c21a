"""
Agro API - Crop Service

Cultivo = uma cultura plantada numa safra. O par (season_id, culture_type_id)
é único.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agro_api.core.exceptions import NotFoundError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Crop, CultureType, Season
from agro_api.models.schemas import CropCreate, CropUpdate, PaginationParams
from agro_api.services.guards import ensure_available, ensure_exists, flush_or_conflict
from agro_api.services.listing import Page, paginate

log = get_logger(__name__)

CROP_TAKEN_MESSAGE = "A crop with this season and culture type combination already exists"

DETAIL_OPTIONS = (
    selectinload(Crop.season),
    selectinload(Crop.culture_type),
)


def filter_conditions(filters: dict) -> list:
    """Condições WHERE a partir de CropFilters (planted_area é mínimo)."""
    conditions = []
    if filters.get("season_id"):
        conditions.append(Crop.season_id == filters["season_id"])
    if filters.get("culture_type_id"):
        conditions.append(Crop.culture_type_id == filters["culture_type_id"])
    if filters.get("planted_area") is not None:
        conditions.append(Crop.planted_area >= filters["planted_area"])
    return conditions


class CropService:
    """Service para gerenciar cultivos."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: CropCreate) -> Crop:
        await ensure_exists(self.db, Season, data.season_id, "Season not found")
        await ensure_exists(self.db, CultureType, data.culture_type_id, "Culture type not found")
        await self._verify_pair_available(data.season_id, data.culture_type_id)

        crop = Crop(
            season_id=data.season_id,
            culture_type_id=data.culture_type_id,
            planted_area=data.planted_area,
        )
        self.db.add(crop)
        await flush_or_conflict(self.db, CROP_TAKEN_MESSAGE)

        log.info(
            "crop_created",
            crop_id=str(crop.id),
            season_id=str(data.season_id),
            culture_type_id=str(data.culture_type_id),
        )
        return await self.get(crop.id)

    async def list(self, params: PaginationParams) -> Page:
        return await paginate(self.db, Crop, params, filter_conditions(params.filters))

    async def get(self, crop_id: UUID) -> Crop:
        result = await self.db.execute(
            select(Crop)
            .where(Crop.id == crop_id)
            .options(*DETAIL_OPTIONS)
            .execution_options(populate_existing=True)
        )
        crop = result.scalar_one_or_none()

        if crop is None:
            raise NotFoundError("Crop not found")

        return crop

    async def update(self, crop_id: UUID, data: CropUpdate) -> Crop:
        crop = await self.get(crop_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "season_id" in changes:
            await ensure_exists(self.db, Season, changes["season_id"], "Season not found")
        if "culture_type_id" in changes:
            await ensure_exists(self.db, CultureType, changes["culture_type_id"], "Culture type not found")

        # Basta uma das chaves mudar para o par resultante poder colidir
        if "season_id" in changes or "culture_type_id" in changes:
            await self._verify_pair_available(
                changes.get("season_id", crop.season_id),
                changes.get("culture_type_id", crop.culture_type_id),
                exclude_id=crop_id,
            )

        for field, value in changes.items():
            setattr(crop, field, value)

        await flush_or_conflict(self.db, CROP_TAKEN_MESSAGE)

        log.info("crop_updated", crop_id=str(crop_id), fields=sorted(changes))
        return await self.get(crop_id)

    async def delete(self, crop_id: UUID) -> Crop:
        crop = await self.get(crop_id)

        await self.db.delete(crop)
        await self.db.flush()

        log.info("crop_deleted", crop_id=str(crop_id))
        return crop

    async def list_by_season(self, season_id: UUID, params: PaginationParams) -> Page:
        await ensure_exists(self.db, Season, season_id, "Season not found")
        return await paginate(
            self.db,
            Crop,
            params,
            conditions=[Crop.season_id == season_id, *filter_conditions(params.filters)],
            options=DETAIL_OPTIONS,
        )

    async def list_by_culture_type(self, culture_type_id: UUID, params: PaginationParams) -> Page:
        await ensure_exists(self.db, CultureType, culture_type_id, "Culture type not found")
        return await paginate(
            self.db,
            Crop,
            params,
            conditions=[Crop.culture_type_id == culture_type_id, *filter_conditions(params.filters)],
            options=DETAIL_OPTIONS,
        )

    async def _verify_pair_available(
        self,
        season_id: UUID,
        culture_type_id: UUID,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        await ensure_available(
            self.db,
            Crop,
            CROP_TAKEN_MESSAGE,
            exclude_id=exclude_id,
            season_id=season_id,
            culture_type_id=culture_type_id,
        )
