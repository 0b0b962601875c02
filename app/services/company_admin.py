"""
Company administration: validation workflow and community-manager assignments.

Admin only. A company has to be validated before it may create offers;
assignments grant community managers the right to manage a company's offers.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DependencyFailure, NotFound, ValidationError
from app.models.company import Company, CompanyAssignment, CompanyStatus
from app.models.user import User
from app.services.access_policy import AccessPolicy, access_policy
from app.services.company_membership import Actor
from app.utils.constants import REJECTION_REASON_MAX_LENGTH, ROLE_COMMUNITY_MANAGER
from app.utils.helpers import normalize_text

logger = structlog.get_logger(__name__)


class CompanyAdminService:

    def __init__(self, db: AsyncSession, policy: AccessPolicy = access_policy):
        self.db = db
        self.policy = policy

    async def validate_company(self, actor: Actor, company_id: uuid.UUID) -> Company:
        self.policy.require_admin(actor)
        company = await self._get_company(company_id)
        company.status = CompanyStatus.VALIDATED
        company.rejection_reason = None
        await self._commit()
        await self.db.refresh(company)
        logger.info("company_validated", company_id=str(company_id), user_id=str(actor.user_id))
        return company

    async def reject_company(self, actor: Actor, company_id: uuid.UUID, reason: Optional[str]) -> Company:
        self.policy.require_admin(actor)
        company = await self._get_company(company_id)

        reason = normalize_text(reason)
        if reason is None:
            raise ValidationError("A rejection reason is required", {"reason": "required"})
        if len(reason) > REJECTION_REASON_MAX_LENGTH:
            raise ValidationError(
                "Rejection reason is too long",
                {"reason": f"at most {REJECTION_REASON_MAX_LENGTH} characters"},
            )

        company.status = CompanyStatus.REJECTED
        company.rejection_reason = reason
        await self._commit()
        await self.db.refresh(company)
        logger.info("company_rejected", company_id=str(company_id), user_id=str(actor.user_id))
        return company

    async def assign_manager(self, actor: Actor, company_id: uuid.UUID, user_id: uuid.UUID) -> CompanyAssignment:
        """Give a community manager access to a company. Assigning twice is a no-op."""
        self.policy.require_admin(actor)
        await self._get_company(company_id)

        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        if ROLE_COMMUNITY_MANAGER not in user.role_names:
            raise ValidationError("User is not a community manager", {"user_id": "not a community manager"})

        existing = await self._get_assignment(company_id, user_id)
        if existing is not None:
            return existing

        assignment = CompanyAssignment(company_id=company_id, user_id=user_id)
        self.db.add(assignment)
        try:
            await self.db.commit()
        except IntegrityError:
            # Assigned concurrently by another request
            await self.db.rollback()
            existing = await self._get_assignment(company_id, user_id)
            if existing is None:
                raise
            return existing
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Could not assign manager") from e

        await self.db.refresh(assignment)
        logger.info(
            "company_manager_assigned",
            company_id=str(company_id),
            manager_id=str(user_id),
            user_id=str(actor.user_id),
        )
        return assignment

    async def unassign_manager(self, actor: Actor, company_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.policy.require_admin(actor)
        try:
            result = await self.db.execute(
                delete(CompanyAssignment).where(
                    CompanyAssignment.company_id == company_id,
                    CompanyAssignment.user_id == user_id,
                )
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Could not remove manager") from e
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Assignment not found")
        await self._commit()
        logger.info(
            "company_manager_unassigned",
            company_id=str(company_id),
            manager_id=str(user_id),
            user_id=str(actor.user_id),
        )

    async def _get_company(self, company_id: uuid.UUID) -> Company:
        company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFound("Company not found")
        return company

    async def _get_assignment(self, company_id: uuid.UUID, user_id: uuid.UUID) -> Optional[CompanyAssignment]:
        result = await self.db.execute(
            select(CompanyAssignment).where(
                CompanyAssignment.company_id == company_id,
                CompanyAssignment.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DependencyFailure("Database write failed") from e
