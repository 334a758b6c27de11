"""Development seed: a default admin account and a starter tag set.

Safe to run repeatedly; existing rows are left alone.
"""
import logging

from sqlalchemy.orm import Session

from eventlog.services import tag_service, user_service

logger = logging.getLogger(__name__)

DEFAULT_TAGS = ["work", "personal", "urgent", "meeting", "project"]


def seed_database(db: Session, admin_password: str = "change-me-admin") -> dict:
    admin = user_service.get_user_by_email(db, "admin@example.com")
    if admin is None:
        admin = user_service.create_user(
            db,
            username="admin",
            email="admin@example.com",
            display_name="Administrator",
            password=admin_password,
        )
    tags = tag_service.create_multiple(db, DEFAULT_TAGS)
    logger.info("Database seeded: admin=%s, %d tag(s)", admin.user_id, len(tags))
    return {"user": admin, "tags": tags}


if __name__ == "__main__":
    from eventlog.database import Base, SessionLocal, engine
    from eventlog.models.user import User                          # noqa: F401
    from eventlog.models.tag import Tag                            # noqa: F401
    from eventlog.models.event import Event                        # noqa: F401
    from eventlog.models.attachment import Attachment              # noqa: F401
    from eventlog.models.event_edit_history import EventEditHistory  # noqa: F401

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_database(session)
    finally:
        session.close()
