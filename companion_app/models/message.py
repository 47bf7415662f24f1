# companion_app/models/message.py
import datetime
import uuid
from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from companion_app.core.database import Base

ROLE_USER = "user"
ROLE_SYSTEM = "system"

class Message(Base):
    """One chat turn between a user and a companion."""
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    companion_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    companion = relationship("Companion", back_populates="messages")

    def __repr__(self):
        return f"<Message(id='{self.id}', role='{self.role}', companion_id='{self.companion_id}')>"
