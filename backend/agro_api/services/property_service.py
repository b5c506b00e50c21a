"""
Agro API - Property Service

Propriedades rurais: regras de área, vínculo com produtor e culturas
plantadas historicamente (N:N com culture_types).
"""
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agro_api.core.exceptions import BadRequestError, NotFoundError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Crop, CultureType, Producer, Property, Season, property_cultures
from agro_api.models.schemas import PaginationParams, PropertyCreate, PropertyUpdate
from agro_api.services import area_rules
from agro_api.services.guards import ensure_exists, flush_or_conflict
from agro_api.services.listing import Page, contains, paginate

log = get_logger(__name__)

ALREADY_ATTACHED_MESSAGE = "Culture type is already attached to this property"


def filter_conditions(filters: dict) -> list:
    """Condições WHERE a partir de PropertyFilters."""
    conditions = []
    if filters.get("name"):
        conditions.append(contains(Property.name, filters["name"]))
    if filters.get("city"):
        conditions.append(contains(Property.city, filters["city"]))
    if filters.get("state"):
        conditions.append(contains(Property.state, filters["state"]))
    if filters.get("producer_id"):
        conditions.append(Property.producer_id == filters["producer_id"])
    return conditions

# Projeção completa: produtor, safras -> cultivos -> tipo de cultura, culturas
DETAIL_OPTIONS = (
    selectinload(Property.producer),
    selectinload(Property.seasons).selectinload(Season.crops).selectinload(Crop.culture_type),
    selectinload(Property.cultures),
)


class PropertyService:
    """Service para gerenciar propriedades."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: PropertyCreate) -> Property:
        await self._verify_producer_exists(data.producer_id)

        areas = area_rules.check_merged(None, data.model_dump())

        prop = Property(
            name=data.name,
            city=data.city,
            state=data.state,
            producer_id=data.producer_id,
            **areas,
        )
        self.db.add(prop)
        await flush_or_conflict(self.db, area_rules.AREA_SUM_MESSAGE)

        log.info(
            "property_created",
            property_id=str(prop.id),
            producer_id=str(data.producer_id),
            total_area=float(areas["total_area"]),
        )
        return await self.get(prop.id)

    async def list(self, params: PaginationParams) -> Page:
        return await paginate(self.db, Property, params, filter_conditions(params.filters))

    async def get(self, property_id: UUID) -> Property:
        result = await self.db.execute(
            select(Property)
            .where(Property.id == property_id)
            .options(*DETAIL_OPTIONS)
            .execution_options(populate_existing=True)
        )
        prop = result.scalar_one_or_none()

        if prop is None:
            raise NotFoundError("Property not found")

        return prop

    async def update(self, property_id: UUID, data: PropertyUpdate) -> Property:
        prop = await self.get(property_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "producer_id" in changes:
            await self._verify_producer_exists(changes["producer_id"])

        # Sempre valida o estado final, nunca os valores parciais
        changes.update(area_rules.check_merged(prop, changes))

        for field, value in changes.items():
            setattr(prop, field, value)

        await flush_or_conflict(self.db, area_rules.AREA_SUM_MESSAGE)

        log.info("property_updated", property_id=str(property_id), fields=sorted(data.model_fields_set))
        return await self.get(property_id)

    async def delete(self, property_id: UUID) -> Property:
        prop = await self.get(property_id)

        await self.db.delete(prop)
        await self.db.flush()

        log.info("property_deleted", property_id=str(property_id))
        return prop

    async def list_by_producer(self, producer_id: UUID, params: PaginationParams) -> Page:
        """
        Propriedades de um produtor, mais recentes primeiro, com safras e cultivos.
        """
        await self._verify_producer_exists(producer_id)

        page = await paginate(
            self.db,
            Property,
            params,
            conditions=[Property.producer_id == producer_id, *filter_conditions(params.filters)],
            options=[
                selectinload(Property.seasons).selectinload(Season.crops).selectinload(Crop.culture_type),
            ],
            order_by=[Property.created_at.desc(), Property.id.asc()],
        )

        for prop in page.items:
            prop.seasons_count = len(prop.seasons)

        return page

    async def attach_culture(self, property_id: UUID, culture_type_id: UUID) -> Property:
        """
        Registra que a cultura já foi plantada na propriedade.
        """
        await self.get(property_id)
        await ensure_exists(self.db, CultureType, culture_type_id, "Culture type not found")

        result = await self.db.execute(
            select(func.count())
            .select_from(property_cultures)
            .where(
                property_cultures.c.property_id == property_id,
                property_cultures.c.culture_type_id == culture_type_id,
            )
        )
        if result.scalar_one() > 0:
            raise BadRequestError(ALREADY_ATTACHED_MESSAGE)

        await self.db.execute(
            insert(property_cultures).values(property_id=property_id, culture_type_id=culture_type_id)
        )
        await flush_or_conflict(self.db, ALREADY_ATTACHED_MESSAGE)

        log.info("culture_attached", property_id=str(property_id), culture_type_id=str(culture_type_id))
        return await self.get(property_id)

    async def _verify_producer_exists(self, producer_id: UUID) -> Producer:
        return await ensure_exists(self.db, Producer, producer_id, "Producer not found")
