"""User ORM model."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from eventlog.database import Base
from eventlog.time_utils import utcnow


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Owned events go with their creator; assignment rows are dropped through the secondary table.
    created_events = relationship(
        "Event", back_populates="creator", cascade="all, delete-orphan",
    )
    assigned_events = relationship(
        "Event", secondary="event_assignments", back_populates="assigned_users",
    )
