"""Admin endpoints - offer moderation views, manual sweep and company administration."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_actor
from app.db.session import get_db
from app.schemas.company import (
    CompanyRejectRequest,
    CompanyResponse,
    ManagerAssignmentRequest,
    ManagerAssignmentResponse,
)
from app.schemas.offer import (
    Audience,
    OfferFilters,
    OfferListResponse,
    OfferOrdering,
    OfferStatsResponse,
    Pagination,
    SweepResponse,
)
from app.api.v1.offers import offer_filters, pagination_params, to_list_response
from app.services.access_policy import access_policy
from app.services.company_admin import CompanyAdminService
from app.services.company_membership import Actor
from app.services.offer_expiry_sweeper import OfferExpirySweeper
from app.services.offer_query_service import OfferQueryService

router = APIRouter()


# ==================== Offers ====================


@router.get("/offers", response_model=OfferListResponse)
async def list_all_offers(
    filters: OfferFilters = Depends(offer_filters),
    pagination: Pagination = Depends(pagination_params),
    ordering: OfferOrdering = Query(OfferOrdering.NEWEST),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """All offers, any status, any company. Admin only."""
    page = await OfferQueryService(db).list(filters, pagination, Audience.ADMIN, actor=actor, ordering=ordering)
    return to_list_response(page)


@router.get("/offers/stats", response_model=OfferStatsResponse)
async def offer_stats(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    stats = await OfferQueryService(db).status_counts(actor, Audience.ADMIN)
    return OfferStatsResponse(total=stats.total, by_status=stats.by_status, sponsored_active=stats.sponsored_active)


@router.post("/offers/sweep", response_model=SweepResponse)
async def sweep_offers(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Close expired offers and clear ended sponsorship right now."""
    access_policy.require_admin(actor)
    result = await OfferExpirySweeper(db).sweep()
    return SweepResponse(**result.to_dict())


# ==================== Companies ====================


@router.post("/companies/{company_id}/validate", response_model=CompanyResponse)
async def validate_company(
    company_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    company = await CompanyAdminService(db).validate_company(actor, company_id)
    return CompanyResponse.model_validate(company)


@router.post("/companies/{company_id}/reject", response_model=CompanyResponse)
async def reject_company(
    company_id: UUID,
    payload: CompanyRejectRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    company = await CompanyAdminService(db).reject_company(actor, company_id, payload.reason)
    return CompanyResponse.model_validate(company)


@router.post(
    "/companies/{company_id}/managers",
    response_model=ManagerAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_company_manager(
    company_id: UUID,
    payload: ManagerAssignmentRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    """Let a community manager manage this company's offers."""
    assignment = await CompanyAdminService(db).assign_manager(actor, company_id, payload.user_id)
    return ManagerAssignmentResponse.model_validate(assignment)


@router.delete("/companies/{company_id}/managers/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_company_manager(
    company_id: UUID,
    user_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await CompanyAdminService(db).unassign_manager(actor, company_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
