"""Attachment ORM model: file reference owned by one event."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from eventlog.database import Base
from eventlog.time_utils import utcnow


class Attachment(Base):
    __tablename__ = "attachments"

    attachment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    filename = Column(String(255), nullable=False)  # stored name
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(127), nullable=False)
    size = Column(Integer, nullable=False)
    path = Column(String(1024), nullable=False)  # storage locator, never opened here
    event_id = Column(
        String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True,
    )
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    event = relationship("Event", back_populates="attachments")
