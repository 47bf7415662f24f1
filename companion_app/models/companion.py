# companion_app/models/companion.py
import datetime
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from companion_app.core.database import Base

def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)

class Companion(Base):
    """SQLAlchemy model for the 'companions' table."""
    __tablename__ = "companions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)
    src = Column(Text, nullable=False)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    instructions = Column("instruction", Text, nullable=False)
    seed = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    category = relationship("Category", back_populates="companions")

    messages = relationship(
        "Message", back_populates="companion",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<Companion(id={self.id}, name='{self.name}', user_id='{self.user_id}')>"
