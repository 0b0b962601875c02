"""
Access Policy

Decides who may manage which company's offers.

Rules:
- admins manage every company
- the recruiter owning a company manages it, but only mutates offers they own
- community managers manage every offer of the companies assigned to them

Checks are membership tests against the ``Actor``'s manageable set, computed
once per request, so repeated checks in one request never hit the database.
"""

import uuid
from typing import Optional

import structlog

from app.core.exceptions import Forbidden
from app.models.offer import Offer
from app.services.company_membership import Actor
from app.utils.constants import OFFER_AUTHOR_ROLES

logger = structlog.get_logger(__name__)


class AccessPolicy:
    """Company-access authorization rules."""

    def can_manage(self, actor: Actor, company_id: Optional[uuid.UUID]) -> bool:
        if actor.is_admin:
            return True
        if company_id is None:
            return False
        return company_id in actor.manageable_company_ids

    def require_manage(self, actor: Actor, company_id: Optional[uuid.UUID]) -> None:
        if not self.can_manage(actor, company_id):
            logger.warning("access_denied", user_id=str(actor.user_id), company_id=str(company_id), reason="manage")
            raise Forbidden("You do not have access to this company")

    def can_edit_offer(self, actor: Actor, offer: Offer, company_id: Optional[uuid.UUID]) -> bool:
        """
        Whether the actor may mutate this particular offer.

        Within a manageable company a plain recruiter is narrowed to offers
        they own, while an assigned community manager may touch any of them.
        """
        if actor.is_admin:
            return True
        if not self.can_manage(actor, company_id):
            return False
        if company_id in actor.assigned_company_ids:
            return True
        return offer.recruiter_id == actor.user_id

    def require_edit_offer(self, actor: Actor, offer: Offer, company_id: Optional[uuid.UUID]) -> None:
        if not self.can_edit_offer(actor, offer, company_id):
            logger.warning(
                "access_denied",
                user_id=str(actor.user_id),
                offer_id=str(offer.id),
                company_id=str(company_id),
                reason="edit_offer",
            )
            raise Forbidden("You do not have access to this offer")

    def require_admin(self, actor: Actor) -> None:
        if not actor.is_admin:
            logger.warning("access_denied", user_id=str(actor.user_id), reason="admin")
            raise Forbidden("Admin access required")

    def require_offer_author(self, actor: Actor) -> None:
        """Only recruiters, community managers and admins create offers."""
        if actor.is_admin or any(role in actor.roles for role in OFFER_AUTHOR_ROLES):
            return
        logger.warning("access_denied", user_id=str(actor.user_id), reason="author")
        raise Forbidden("Only recruiters and community managers can create offers")


# Stateless; shared by the services
access_policy = AccessPolicy()
