# companion_app/models/category.py
import uuid
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from companion_app.core.database import Base

class Category(Base):
    """SQLAlchemy model for the 'categories' lookup table."""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, unique=True)

    companions = relationship("Companion", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
