"""Tag ORM model."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from eventlog.database import Base
from eventlog.time_utils import utcnow

# Palette used when a tag is created without an explicit color.
TAG_COLORS = (
    "#3B82F6",  # blue
    "#EF4444",  # red
    "#10B981",  # green
    "#F59E0B",  # yellow
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#84CC16",  # lime
    "#F97316",  # orange
    "#6366F1",  # indigo
)


class Tag(Base):
    __tablename__ = "tags"

    tag_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), nullable=False, unique=True, index=True)
    color = Column(String(7), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    events = relationship("Event", secondary="event_tags", back_populates="tags")
