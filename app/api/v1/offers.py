"""Offer endpoints - public listings, recruiter workspace and lifecycle actions."""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_actor
from app.db.session import get_db
from app.models.offer import OfferKind, OfferStatus
from app.schemas.offer import (
    Audience,
    FeatureRequest,
    OfferCreate,
    OfferFilters,
    OfferListResponse,
    OfferOrdering,
    OfferResponse,
    OfferStatsResponse,
    OfferUpdate,
    Pagination,
    RejectRequest,
    SweepResponse,
)
from app.services.company_membership import Actor
from app.services.offer_lifecycle import OfferLifecycle, allowed_actions
from app.services.offer_query_service import OfferPage, OfferQueryService

router = APIRouter()


def offer_filters(
    status: Optional[OfferStatus] = Query(None, description="Lifecycle status"),
    offer_kind: Optional[OfferKind] = Query(None, description="job or internship"),
    location: Optional[str] = Query(None, description="Location substring (case-insensitive)"),
    category_id: Optional[UUID] = Query(None),
    experience: Optional[str] = Query(None, description="Experience substring (case-insensitive)"),
    recruiter_id: Optional[UUID] = Query(None, description="Owning user"),
    company_id: Optional[UUID] = Query(None, description="Owning company (matched through its owner)"),
    search: Optional[str] = Query(None, description="Free text over title and description"),
    sponsored: Optional[Literal["yes", "no"]] = Query(None, description="Currently featured or not"),
    sponsored_level: Optional[int] = Query(None, ge=0, le=3),
    sponsored_level_min: Optional[int] = Query(None, ge=0, le=3),
) -> OfferFilters:
    return OfferFilters(
        status=status,
        offer_kind=offer_kind,
        location=location,
        category_id=category_id,
        experience=experience,
        recruiter_id=recruiter_id,
        company_id=company_id,
        search=search,
        sponsored=sponsored,
        sponsored_level=sponsored_level,
        sponsored_level_min=sponsored_level_min,
    )


def pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: Optional[int] = Query(None, ge=1, description="Items per page (capped)"),
) -> Pagination:
    return Pagination(page=page, size=size)


def to_response(offer) -> OfferResponse:
    response = OfferResponse.model_validate(offer)
    response.allowed_actions = [action.value for action in allowed_actions(offer.status)]
    return response


def to_list_response(page: OfferPage) -> OfferListResponse:
    return OfferListResponse(
        items=[to_response(offer) for offer in page.items],
        total=page.total,
        page=page.page,
        size=page.size,
        pages=page.pages,
        meta=SweepResponse(**page.sweep.to_dict()) if page.sweep else None,
    )


# ==================== Listings ====================


@router.get("/", response_model=OfferListResponse)
async def list_active_offers(
    filters: OfferFilters = Depends(offer_filters),
    pagination: Pagination = Depends(pagination_params),
    ordering: OfferOrdering = Query(OfferOrdering.NEWEST),
    db: AsyncSession = Depends(get_db),
):
    """
    Public listing of active offers (published and not expired).

    Expired offers and ended sponsorship are swept before the query runs.
    """
    page = await OfferQueryService(db).list(filters, pagination, Audience.PUBLIC, ordering=ordering)
    return to_list_response(page)


@router.get("/featured", response_model=List[OfferResponse])
async def list_featured_offers(
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Currently featured active offers, highest sponsorship level first."""
    offers = await OfferQueryService(db).featured(limit)
    return [to_response(offer) for offer in offers]


@router.get("/mine", response_model=OfferListResponse)
async def list_my_offers(
    filters: OfferFilters = Depends(offer_filters),
    pagination: Pagination = Depends(pagination_params),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Offers of the companies the caller owns or manages."""
    page = await OfferQueryService(db).list(filters, pagination, Audience.RECRUITER, actor=actor)
    return to_list_response(page)


@router.get("/mine/stats", response_model=OfferStatsResponse)
async def my_offer_stats(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    stats = await OfferQueryService(db).status_counts(actor, Audience.RECRUITER)
    return OfferStatsResponse(total=stats.total, by_status=stats.by_status, sponsored_active=stats.sponsored_active)


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(offer_id: UUID, db: AsyncSession = Depends(get_db)):
    """Public offer detail; only active offers are visible."""
    offer = await OfferQueryService(db).get(offer_id, audience=Audience.PUBLIC)
    return to_response(offer)


# ==================== Authoring ====================


@router.post("/", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
async def create_offer(
    payload: OfferCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Create a draft offer for the caller's company (or an explicit managed company)."""
    offer = await OfferLifecycle(db).create_offer(actor, payload)
    return to_response(offer)


@router.patch("/{offer_id}", response_model=OfferResponse)
async def update_offer(
    offer_id: UUID,
    payload: OfferUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).update_offer(actor, offer_id, payload)
    return to_response(offer)


@router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await OfferLifecycle(db).delete_offer(actor, offer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Lifecycle ====================


@router.post("/{offer_id}/submit", response_model=OfferResponse)
async def submit_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Send a draft to the admins for validation."""
    offer = await OfferLifecycle(db).submit_for_validation(actor, offer_id)
    return to_response(offer)


@router.post("/{offer_id}/validate", response_model=OfferResponse)
async def validate_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).validate(actor, offer_id)
    return to_response(offer)


@router.post("/{offer_id}/reject", response_model=OfferResponse)
async def reject_offer(
    offer_id: UUID,
    payload: RejectRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).reject(actor, offer_id, payload.reason)
    return to_response(offer)


@router.post("/{offer_id}/publish", response_model=OfferResponse)
async def publish_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Publish a validated offer; candidates of its category get notified asynchronously."""
    offer = await OfferLifecycle(db).publish(actor, offer_id)
    return to_response(offer)


@router.post("/{offer_id}/close", response_model=OfferResponse)
async def close_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).close(actor, offer_id)
    return to_response(offer)


# ==================== Sponsorship ====================


@router.post("/{offer_id}/feature", response_model=OfferResponse)
async def feature_offer(
    offer_id: UUID,
    payload: FeatureRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).mark_featured(
        actor,
        offer_id,
        level=payload.sponsored_level,
        featured_until=payload.featured_until,
        duration_days=payload.duration_days,
    )
    return to_response(offer)


@router.delete("/{offer_id}/feature", response_model=OfferResponse)
async def unfeature_offer(
    offer_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    offer = await OfferLifecycle(db).unfeature(actor, offer_id)
    return to_response(offer)
