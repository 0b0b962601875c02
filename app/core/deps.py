"""Dependency functions for FastAPI routes."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.services.company_membership import Actor, load_actor


async def get_current_actor(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """Roles and manageable companies of the caller, resolved for this request only."""
    return await load_actor(db, current_user)
