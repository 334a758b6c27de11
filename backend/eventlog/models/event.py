"""Event ORM model and its association tables."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey, Table, Enum as SAEnum
from sqlalchemy.orm import relationship
from eventlog.database import Base
from eventlog.time_utils import utcnow


class EventType(str, enum.Enum):
    simple_message = "simple_message"
    photo_with_notes = "photo_with_notes"
    email = "email"
    text = "text"
    document = "document"


# Composite primary keys make a duplicate assignment or tag link impossible.
event_assignments = Table(
    "event_assignments",
    Base.metadata,
    Column("event_id", String(36), ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True, index=True),
)

event_tags = Table(
    "event_tags",
    Base.metadata,
    Column("event_id", String(36), ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.tag_id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    event_type = Column(SAEnum(EventType), nullable=False, default=EventType.simple_message)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, nullable=True)
    creator_id = Column(
        String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    creator = relationship("User", back_populates="created_events")
    assigned_users = relationship(
        "User", secondary=event_assignments, back_populates="assigned_events",
        order_by="User.display_name",
    )
    tags = relationship("Tag", secondary=event_tags, back_populates="events", order_by="Tag.name")
    attachments = relationship(
        "Attachment", back_populates="event", cascade="all, delete-orphan",
        order_by="Attachment.uploaded_at",
    )
    edit_history = relationship(
        "EventEditHistory", back_populates="event", cascade="all, delete-orphan",
        order_by="EventEditHistory.edited_at",
    )
