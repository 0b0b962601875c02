"""Company administration schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.models.company import CompanyStatus


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    status: CompanyStatus
    rejection_reason: Optional[str] = None
    owner_id: UUID
    created_at: Optional[datetime] = None


class CompanyRejectRequest(BaseModel):
    reason: str = ""


class ManagerAssignmentRequest(BaseModel):
    user_id: UUID


class ManagerAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    user_id: UUID
    created_at: Optional[datetime] = None
