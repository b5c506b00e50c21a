"""
Agro API - Season Service

Safras: (property_id, name, year) é único.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agro_api.core.exceptions import NotFoundError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Crop, Property, Season
from agro_api.models.schemas import PaginationParams, SeasonCreate, SeasonUpdate
from agro_api.services.guards import ensure_available, ensure_exists, flush_or_conflict
from agro_api.services.listing import Page, contains, paginate

log = get_logger(__name__)

SEASON_TAKEN_MESSAGE = "Season with this name and year already exists for this property"
NATURAL_KEY = ("property_id", "name", "year")


def filter_conditions(filters: dict) -> list:
    conditions = []
    if filters.get("name"):
        conditions.append(contains(Season.name, filters["name"]))
    if filters.get("year") is not None:
        conditions.append(Season.year == filters["year"])
    if filters.get("property_id"):
        conditions.append(Season.property_id == filters["property_id"])
    return conditions


class SeasonService:
    """Service para gerenciar safras."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: SeasonCreate) -> Season:
        await ensure_exists(self.db, Property, data.property_id, "Property not found")
        await self._verify_available(data.property_id, data.name, data.year)

        season = Season(name=data.name, year=data.year, property_id=data.property_id)
        self.db.add(season)
        await flush_or_conflict(self.db, SEASON_TAKEN_MESSAGE)

        log.info("season_created", season_id=str(season.id), property_id=str(data.property_id), year=data.year)
        return await self.get(season.id)

    async def list(self, params: PaginationParams) -> Page:
        return await paginate(self.db, Season, params, filter_conditions(params.filters))

    async def get(self, season_id: UUID) -> Season:
        result = await self.db.execute(
            select(Season)
            .where(Season.id == season_id)
            .options(
                selectinload(Season.property),
                selectinload(Season.crops).selectinload(Crop.culture_type),
            )
            .execution_options(populate_existing=True)
        )
        season = result.scalar_one_or_none()

        if season is None:
            raise NotFoundError("Season not found")

        return season

    async def list_by_property(self, property_id: UUID, params: PaginationParams) -> Page:
        """Safras da propriedade, da mais recente para a mais antiga."""
        await ensure_exists(self.db, Property, property_id, "Property not found")

        return await paginate(
            self.db,
            Season,
            params,
            conditions=[Season.property_id == property_id, *filter_conditions(params.filters)],
            options=[selectinload(Season.crops).selectinload(Crop.culture_type)],
            order_by=[Season.year.desc(), Season.id.asc()],
        )

    async def update(self, season_id: UUID, data: SeasonUpdate) -> Season:
        season = await self.get(season_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "property_id" in changes:
            await ensure_exists(self.db, Property, changes["property_id"], "Property not found")

        # Qualquer parte da chave alterada: checa a tupla resultante
        if any(field in changes for field in NATURAL_KEY):
            merged = {field: changes.get(field, getattr(season, field)) for field in NATURAL_KEY}
            await self._verify_available(exclude_id=season_id, **merged)

        for field, value in changes.items():
            setattr(season, field, value)

        await flush_or_conflict(self.db, SEASON_TAKEN_MESSAGE)

        log.info("season_updated", season_id=str(season_id), fields=sorted(changes))
        return await self.get(season_id)

    async def delete(self, season_id: UUID) -> Season:
        season = await self.get(season_id)

        await self.db.delete(season)
        await self.db.flush()

        log.info("season_deleted", season_id=str(season_id))
        return season

    async def _verify_available(
        self,
        property_id: UUID,
        name: str,
        year: int,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        await ensure_available(
            self.db,
            Season,
            SEASON_TAKEN_MESSAGE,
            exclude_id=exclude_id,
            property_id=property_id,
            name=name,
            year=year,
        )
