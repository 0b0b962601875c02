"""Offer schemas for API requests and responses."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.offer import OfferKind, OfferStatus


class OfferBase(BaseModel):
    """Descriptive offer fields."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    experience: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    offer_kind: OfferKind
    contract_type: str = Field(..., min_length=1, max_length=255)
    expiration_date: date
    salary: Optional[Decimal] = None
    category_id: UUID


class OfferCreate(OfferBase):
    """Offer creation payload; status always starts as draft."""
    company_id: Optional[UUID] = None
    sponsored_level: int = 0
    featured_until: Optional[datetime] = None


class OfferUpdate(BaseModel):
    """Partial update of descriptive fields. Status is never writable here."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    experience: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    offer_kind: Optional[OfferKind] = None
    contract_type: Optional[str] = Field(None, min_length=1, max_length=255)
    expiration_date: Optional[date] = None
    salary: Optional[Decimal] = None
    category_id: Optional[UUID] = None


class RejectRequest(BaseModel):
    reason: str = ""


class FeatureRequest(BaseModel):
    """Sponsorship request. An explicit featured_until wins over duration_days."""
    sponsored_level: int = 1
    duration_days: Optional[int] = None
    featured_until: Optional[datetime] = None


class OfferResponse(BaseModel):
    """Offer as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    experience: str
    location: str
    offer_kind: OfferKind
    contract_type: str
    status: OfferStatus
    publication_date: Optional[date] = None
    expiration_date: date
    salary: Optional[Decimal] = None
    rejection_reason: Optional[str] = None
    validated_at: Optional[datetime] = None
    validated_by_id: Optional[UUID] = None
    sponsored_level: int = 0
    featured_until: Optional[datetime] = None
    is_featured: bool = False
    recruiter_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    created_by_id: Optional[UUID] = None
    category_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    allowed_actions: List[str] = []


class SweepResponse(BaseModel):
    closed_count: int
    unfeatured_count: int


class OfferListResponse(BaseModel):
    """Paginated offer list."""
    items: List[OfferResponse]
    total: int
    page: int
    size: int
    pages: int
    meta: Optional[SweepResponse] = None


class OfferStatsResponse(BaseModel):
    total: int
    by_status: dict
    sponsored_active: int


class Audience(str, Enum):
    """Who a listing is built for."""

    PUBLIC = "public"
    RECRUITER = "recruiter"
    ADMIN = "admin"


class OfferOrdering(str, Enum):
    NEWEST = "newest"  # created_at desc
    PUBLISHED = "published"  # publication_date desc


class OfferFilters(BaseModel):
    """Optional listing filters, combined with AND."""
    status: Optional[OfferStatus] = None
    offer_kind: Optional[OfferKind] = None
    location: Optional[str] = None
    category_id: Optional[UUID] = None
    experience: Optional[str] = None
    recruiter_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    search: Optional[str] = None
    sponsored: Optional[Literal["yes", "no"]] = None
    sponsored_level: Optional[int] = None
    sponsored_level_min: Optional[int] = None


class Pagination(BaseModel):
    page: int = Field(1, ge=1)
    size: Optional[int] = Field(None, ge=1)
