"""
Agro API - Culture Type Service

Catálogo de culturas (soja, milho, café...). O name é único e um tipo em uso
por algum cultivo não pode ser removido.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.core.exceptions import BadRequestError, NotFoundError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Crop, CultureType
from agro_api.models.schemas import CultureTypeCreate, CultureTypeUpdate, PaginationParams
from agro_api.services.guards import ensure_available, flush_or_conflict
from agro_api.services.listing import Page, contains, paginate

log = get_logger(__name__)

NAME_TAKEN_MESSAGE = "Culture type with this name already exists"
IN_USE_MESSAGE = "Cannot delete culture type that is being used in crops"


class CultureTypeService:
    """Service para gerenciar tipos de cultura."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: CultureTypeCreate) -> CultureType:
        await self._verify_name_available(data.name)

        culture_type = CultureType(name=data.name, title=data.title)
        self.db.add(culture_type)
        await flush_or_conflict(self.db, NAME_TAKEN_MESSAGE)

        log.info("culture_type_created", culture_type_id=str(culture_type.id), name=data.name)
        return await self.get(culture_type.id)

    async def list(self, params: PaginationParams) -> Page:
        filters = params.filters
        conditions = []

        if filters.get("name"):
            conditions.append(contains(CultureType.name, filters["name"]))
        if filters.get("title"):
            conditions.append(contains(CultureType.title, filters["title"]))

        page = await paginate(self.db, CultureType, params, conditions)

        counts = await self._crops_counts([item.id for item in page.items])
        for item in page.items:
            item.crops_count = counts.get(item.id, 0)

        return page

    async def get(self, culture_type_id: UUID) -> CultureType:
        result = await self.db.execute(
            select(CultureType)
            .where(CultureType.id == culture_type_id)
            .execution_options(populate_existing=True)
        )
        culture_type = result.scalar_one_or_none()

        if culture_type is None:
            raise NotFoundError("Culture type not found")

        counts = await self._crops_counts([culture_type.id])
        culture_type.crops_count = counts.get(culture_type.id, 0)
        return culture_type

    async def update(self, culture_type_id: UUID, data: CultureTypeUpdate) -> CultureType:
        culture_type = await self.get(culture_type_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "name" in changes:
            await self._verify_name_available(changes["name"], exclude_id=culture_type_id)

        for field, value in changes.items():
            setattr(culture_type, field, value)

        await flush_or_conflict(self.db, NAME_TAKEN_MESSAGE)

        log.info("culture_type_updated", culture_type_id=str(culture_type_id), fields=sorted(changes))
        return await self.get(culture_type_id)

    async def delete(self, culture_type_id: UUID) -> CultureType:
        culture_type = await self.get(culture_type_id)

        if culture_type.crops_count > 0:
            log.info(
                "culture_type_delete_refused",
                culture_type_id=str(culture_type_id),
                crops_count=culture_type.crops_count,
            )
            raise BadRequestError(IN_USE_MESSAGE)

        await self.db.delete(culture_type)
        await self.db.flush()

        log.info("culture_type_deleted", culture_type_id=str(culture_type_id))
        return culture_type

    async def _crops_counts(self, culture_type_ids) -> dict:
        """Quantidade de cultivos por tipo de cultura (uma query para a página toda)."""
        if not culture_type_ids:
            return {}

        result = await self.db.execute(
            select(Crop.culture_type_id, func.count(Crop.id))
            .where(Crop.culture_type_id.in_(culture_type_ids))
            .group_by(Crop.culture_type_id)
        )
        return {row[0]: row[1] for row in result.all()}

    async def _verify_name_available(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        await ensure_available(
            self.db,
            CultureType,
            NAME_TAKEN_MESSAGE,
            exclude_id=exclude_id,
            name=name,
        )
