"""
Agro API - Producer Service

Cadastro de produtores rurais (CPF ou CNPJ único).
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from agro_api.core.exceptions import BadRequestError, NotFoundError
from agro_api.core.logging_config import get_logger
from agro_api.models.database import Producer
from agro_api.models.schemas import (
    DocumentType,
    PaginationParams,
    ProducerCreate,
    ProducerUpdate,
)
from agro_api.services import tax_id
from agro_api.services.guards import ensure_available, flush_or_conflict
from agro_api.services.listing import Page, contains, paginate

log = get_logger(__name__)

DOCUMENT_TAKEN_MESSAGE = "Producer with this document already exists"
INVALID_DOCUMENT_MESSAGE = "Invalid document format"


class ProducerService:
    """Service para gerenciar produtores."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: ProducerCreate) -> Producer:
        document = tax_id.normalize(data.document)

        await self._verify_document_available(document)
        self._validate_document(data.document, data.document_type)

        producer = Producer(
            document=document,
            document_type=data.document_type.value,
            name=data.name,
        )
        self.db.add(producer)
        await flush_or_conflict(self.db, DOCUMENT_TAKEN_MESSAGE)

        log.info("producer_created", producer_id=str(producer.id), document_type=producer.document_type)
        return await self.get(producer.id)

    async def list(self, params: PaginationParams) -> Page:
        filters = params.filters
        conditions = []

        if filters.get("name"):
            conditions.append(contains(Producer.name, filters["name"]))
        if filters.get("document"):
            conditions.append(contains(Producer.document, tax_id.normalize(filters["document"])))
        if filters.get("document_type"):
            conditions.append(Producer.document_type == DocumentType(filters["document_type"]).value)

        return await paginate(self.db, Producer, params, conditions)

    async def get(self, producer_id: UUID) -> Producer:
        result = await self.db.execute(
            select(Producer)
            .where(Producer.id == producer_id)
            .options(selectinload(Producer.properties))
            .execution_options(populate_existing=True)
        )
        producer = result.scalar_one_or_none()

        if producer is None:
            raise NotFoundError("Producer not found")

        return producer

    async def update(self, producer_id: UUID, data: ProducerUpdate) -> Producer:
        producer = await self.get(producer_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "document" in changes:
            changes["document"] = tax_id.normalize(changes["document"])

            if "document_type" in changes:
                self._validate_document(data.document, data.document_type)
            elif not tax_id.has_document_shape(data.document):
                # Sem o tipo não há como conferir os verificadores, só o formato
                raise BadRequestError(INVALID_DOCUMENT_MESSAGE)

            await self._verify_document_available(changes["document"], exclude_id=producer_id)

        if "document_type" in changes:
            changes["document_type"] = DocumentType(changes["document_type"]).value

        for field, value in changes.items():
            setattr(producer, field, value)

        await flush_or_conflict(self.db, DOCUMENT_TAKEN_MESSAGE)

        log.info("producer_updated", producer_id=str(producer_id), fields=sorted(changes))
        return await self.get(producer_id)

    async def delete(self, producer_id: UUID) -> Producer:
        producer = await self.get(producer_id)

        await self.db.delete(producer)
        await self.db.flush()

        log.info("producer_deleted", producer_id=str(producer_id))
        return producer

    async def _verify_document_available(self, document: str, exclude_id: Optional[UUID] = None) -> None:
        await ensure_available(
            self.db,
            Producer,
            DOCUMENT_TAKEN_MESSAGE,
            exclude_id=exclude_id,
            document=document,
        )

    @staticmethod
    def _validate_document(document: str, document_type: DocumentType) -> None:
        if not tax_id.validate(document, document_type):
            raise BadRequestError(f"Invalid {DocumentType(document_type).value} format")
