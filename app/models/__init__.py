"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization
# This prevents SQLAlchemy circular dependency errors

# Base models (no foreign keys)
from app.models.user import User, UserRole
from app.models.category import Category

# Models with foreign keys to base models
from app.models.company import Company, CompanyAssignment, CompanyStatus
from app.models.offer import Offer, OfferKind, OfferStatus

# Models with foreign keys to other models
from app.models.application import Application

# Export all models
__all__ = [
    "User",
    "UserRole",
    "Category",
    "Company",
    "CompanyAssignment",
    "CompanyStatus",
    "Offer",
    "OfferKind",
    "OfferStatus",
    "Application",
]
