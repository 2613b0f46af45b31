from sqlalchemy.orm import Session
from shiptrack.db.models.department import Department

def get_department(db: Session, department_id: int) -> Department | None:
    return db.get(Department, department_id)

def get_department_by_name(db: Session, name: str) -> Department | None:
    return db.query(Department).filter(Department.name == name.strip()).one_or_none()
