"""
Agro API - Modelos SQLAlchemy (ORM)
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    CheckConstraint, Column, DateTime, ForeignKey, Index, Integer,
    Numeric, String, Table, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class para todos os modelos"""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ASSOCIAÇÕES
# =============================================================================

# Culturas já plantadas historicamente em cada propriedade
property_cultures = Table(
    "property_cultures",
    Base.metadata,
    Column("property_id", Uuid, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("culture_type_id", Uuid, ForeignKey("culture_types.id", ondelete="CASCADE"), primary_key=True),
)


# =============================================================================
# MODELS
# =============================================================================

class Producer(Base):
    __tablename__ = "producers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document = Column(String(14), unique=True, nullable=False)  # apenas dígitos
    document_type = Column(String(4), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    properties = relationship(
        "Property",
        back_populates="producer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    producer_id = Column(Uuid, ForeignKey("producers.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)

    # Áreas em hectares
    total_area = Column(Numeric(12, 2), nullable=False)
    arable_area = Column(Numeric(12, 2), nullable=False)
    vegetation_area = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    producer = relationship("Producer", back_populates="properties")
    seasons = relationship(
        "Season",
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    cultures = relationship(
        "CultureType",
        secondary=property_cultures,
        back_populates="properties",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "arable_area >= 0 AND vegetation_area >= 0 AND total_area >= 0",
            name="ck_properties_areas_non_negative",
        ),
        # SQLite compara em ponto flutuante (0.1 + 0.2 > 0.3)
        CheckConstraint(
            "arable_area + vegetation_area <= total_area",
            name="ck_properties_area_sum",
        ).ddl_if(dialect="postgresql"),
        Index("idx_properties_producer", "producer_id"),
        Index("idx_properties_state", "state"),
    )


class Season(Base):
    __tablename__ = "seasons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    year = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    property = relationship("Property", back_populates="seasons")
    crops = relationship(
        "Crop",
        back_populates="season",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("property_id", "name", "year", name="uq_seasons_property_name_year"),
    )


class CultureType(Base):
    __tablename__ = "culture_types"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)  # slug, ex: "soja"
    title = Column(String(255), nullable=False)              # exibição, ex: "Soja"

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    crops = relationship("Crop", back_populates="culture_type", passive_deletes=True)
    properties = relationship(
        "Property",
        secondary=property_cultures,
        back_populates="cultures",
        passive_deletes=True,
    )


class Crop(Base):
    __tablename__ = "crops"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    season_id = Column(Uuid, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    culture_type_id = Column(Uuid, ForeignKey("culture_types.id", ondelete="CASCADE"), nullable=False)

    planted_area = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    season = relationship("Season", back_populates="crops")
    culture_type = relationship("CultureType", back_populates="crops")

    __table_args__ = (
        UniqueConstraint("season_id", "culture_type_id", name="uq_crops_season_culture"),
        CheckConstraint("planted_area IS NULL OR planted_area > 0", name="ck_crops_planted_area_positive"),
        Index("idx_crops_culture_type", "culture_type_id"),
    )
