from sqlalchemy.orm import Session
from shiptrack.db.session import SessionLocal
from shiptrack.core.config import settings
from shiptrack.core.logging import logger
from shiptrack.crud.departments import get_department_by_name
from shiptrack.crud.users import get_user_by_email
from shiptrack.db.models.department import Department
from shiptrack.db.models.user import User, Role

def seed_demo(db: Session | None = None):
    own = db is None
    db = db or SessionLocal()
    try:
        dept = get_department_by_name(db, settings.DEMO_DEPARTMENT_NAME)
        if not dept:
            dept = Department(name=settings.DEMO_DEPARTMENT_NAME, code="MGMT", is_management=True)
            db.add(dept)
            db.flush()
        if settings.DEMO_ADMIN_EMAIL and not get_user_by_email(db, settings.DEMO_ADMIN_EMAIL):
            db.add(User(
                email=settings.DEMO_ADMIN_EMAIL,
                name="Demo Admin",
                department_id=dept.id,
                role=Role.management.value,
            ))
            logger.info("demo_admin_seeded", email=settings.DEMO_ADMIN_EMAIL)
        db.commit()
    finally:
        if own:
            db.close()
