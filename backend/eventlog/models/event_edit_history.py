"""EventEditHistory ORM model: append-only field-level change log."""
import uuid
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from eventlog.database import Base
from eventlog.time_utils import utcnow


class EventEditHistory(Base):
    __tablename__ = "event_edit_history"

    history_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(
        String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True,
    )
    changes = Column(JSON, nullable=False)  # {field: {"from": ..., "to": ...}}
    edited_by = Column(String(36), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    edited_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    event = relationship("Event", back_populates="edit_history")
