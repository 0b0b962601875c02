"""Category model."""

from sqlalchemy import Column, String

from app.db.base import Base


class Category(Base):
    """Job category (reference data)."""

    __tablename__ = "categories"

    name = Column(String(255), unique=True, nullable=False)

    def __repr__(self):
        return f"<Category {self.name}>"
