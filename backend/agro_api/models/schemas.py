"""
Agro API - Schemas Pydantic (Validação e Serialização)
"""
from datetime import datetime
from typing import Optional, List, Any, Dict, Generic, TypeVar
from uuid import UUID
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================

class DocumentType(str, Enum):
    CPF = "CPF"
    CNPJ = "CNPJ"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _upper_state(v: Optional[str]) -> Optional[str]:
    return v.upper() if v else v


# =============================================================================
# PRODUCER SCHEMAS
# =============================================================================

class ProducerCreate(BaseModel):
    document: str = Field(..., min_length=11, max_length=18, examples=["11144477735"])
    document_type: DocumentType
    name: str = Field(..., min_length=1, max_length=255, examples=["João Silva"])


class ProducerUpdate(BaseModel):
    document: Optional[str] = Field(None, min_length=11, max_length=18)
    document_type: Optional[DocumentType] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class ProducerResponse(ORMModel):
    id: UUID
    document: str
    document_type: DocumentType
    name: str
    created_at: datetime
    updated_at: datetime


class ProducerSummary(ORMModel):
    id: UUID
    name: str
    document: str
    document_type: DocumentType


class PropertySummary(ORMModel):
    id: UUID
    name: str
    city: str
    state: str


class ProducerDetail(ProducerResponse):
    properties: List[PropertySummary] = Field(default_factory=list)


# =============================================================================
# CULTURE TYPE SCHEMAS
# =============================================================================

class CultureTypeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Soja"])
    name: str = Field(..., min_length=1, max_length=255, examples=["soja"])


class CultureTypeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class CultureTypeResponse(ORMModel):
    id: UUID
    name: str
    title: str
    created_at: datetime
    updated_at: datetime


class CultureTypeDetail(CultureTypeResponse):
    crops_count: int = 0


# =============================================================================
# CROP SCHEMAS
# =============================================================================

class CropCreate(BaseModel):
    season_id: UUID
    culture_type_id: UUID
    planted_area: Optional[float] = Field(
        None, gt=0, le=9999999999.99, allow_inf_nan=False, description="Área plantada em hectares"
    )


class CropUpdate(BaseModel):
    season_id: Optional[UUID] = None
    culture_type_id: Optional[UUID] = None
    planted_area: Optional[float] = Field(None, gt=0, le=9999999999.99, allow_inf_nan=False)


class CropResponse(ORMModel):
    id: UUID
    season_id: UUID
    culture_type_id: UUID
    planted_area: Optional[float]
    created_at: datetime
    updated_at: datetime


class SeasonRef(ORMModel):
    id: UUID
    name: str


class CultureTypeRef(ORMModel):
    id: UUID
    title: str


class CropDetail(CropResponse):
    season: SeasonRef
    culture_type: CultureTypeRef


class CultureTypeName(ORMModel):
    name: str


class CropWithCultureName(ORMModel):
    id: UUID
    culture_type: CultureTypeName


class CropWithCulture(CropResponse):
    culture_type: CultureTypeResponse


# =============================================================================
# SEASON SCHEMAS
# =============================================================================

class SeasonCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Safra 2024"])
    year: int = Field(..., ge=1900, le=2100)
    property_id: UUID


class SeasonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    property_id: Optional[UUID] = None


class SeasonResponse(ORMModel):
    id: UUID
    name: str
    year: int
    property_id: UUID
    created_at: datetime
    updated_at: datetime


class PropertyRef(ORMModel):
    id: UUID
    name: str


class SeasonDetail(SeasonResponse):
    property: PropertyRef
    crops: List[CropWithCultureName] = Field(default_factory=list)


class SeasonWithCrops(ORMModel):
    id: UUID
    name: str
    year: int
    crops: List[CropWithCulture] = Field(default_factory=list)


class SeasonListItem(SeasonResponse):
    crops: List[CropWithCulture] = Field(default_factory=list)


# =============================================================================
# PROPERTY SCHEMAS
# =============================================================================

class PropertyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Fazenda São João"])
    city: str = Field(..., min_length=1, max_length=100, examples=["Ribeirão Preto"])
    state: str = Field(..., min_length=2, max_length=2, examples=["SP"])
    total_area: float = Field(..., allow_inf_nan=False, description="Área total em hectares")
    arable_area: float = Field(..., allow_inf_nan=False, description="Área agricultável em hectares")
    vegetation_area: float = Field(..., allow_inf_nan=False, description="Área de vegetação em hectares")
    producer_id: UUID

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: Optional[str]) -> Optional[str]:
        return _upper_state(v)


class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    total_area: Optional[float] = Field(None, allow_inf_nan=False)
    arable_area: Optional[float] = Field(None, allow_inf_nan=False)
    vegetation_area: Optional[float] = Field(None, allow_inf_nan=False)
    producer_id: Optional[UUID] = None

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: Optional[str]) -> Optional[str]:
        return _upper_state(v)


class AttachCultureRequest(BaseModel):
    culture_type_id: UUID


class PropertyResponse(ORMModel):
    id: UUID
    name: str
    city: str
    state: str
    total_area: float
    arable_area: float
    vegetation_area: float
    producer_id: UUID
    created_at: datetime
    updated_at: datetime


class PropertyWithProducer(PropertyResponse):
    producer: ProducerSummary


class PropertyDetail(PropertyWithProducer):
    seasons: List[SeasonWithCrops] = Field(default_factory=list)
    cultures: List[CultureTypeResponse] = Field(default_factory=list)


class ProducerPropertyItem(PropertyResponse):
    seasons: List[SeasonWithCrops] = Field(default_factory=list)
    seasons_count: int = 0


# =============================================================================
# LIST FILTERS
# =============================================================================

class ProducerFilters(BaseModel):
    name: Optional[str] = None
    document: Optional[str] = None
    document_type: Optional[DocumentType] = None


class PropertyFilters(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    producer_id: Optional[UUID] = None


class SeasonFilters(BaseModel):
    name: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    property_id: Optional[UUID] = None


class CultureTypeFilters(BaseModel):
    name: Optional[str] = None
    title: Optional[str] = None


class CropFilters(BaseModel):
    season_id: Optional[UUID] = None
    culture_type_id: Optional[UUID] = None
    planted_area: Optional[float] = Field(None, ge=0, allow_inf_nan=False)


# =============================================================================
# DASHBOARD SCHEMAS
# =============================================================================

class StateCount(BaseModel):
    state: str
    count: int


class CultureCount(BaseModel):
    culture: str
    count: int


class LandUseItem(BaseModel):
    type: str
    value: float


class DashboardCharts(BaseModel):
    farms_by_state: List[StateCount]
    farms_by_culture: List[CultureCount]
    land_use: List[LandUseItem]


class DashboardStats(BaseModel):
    total_farms: int
    total_hectares: float
    charts: DashboardCharts


# =============================================================================
# API RESPONSE WRAPPERS
# =============================================================================

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int
    pages: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None
    detail: Optional[Any] = None


class PaginationParams(BaseModel):
    """Parâmetros de listagem já normalizados."""
    page: int = 1
    page_size: int = 10
    order_by: Optional[str] = None
    order: SortOrder = SortOrder.ASC
    filters: Dict[str, Any] = Field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size
