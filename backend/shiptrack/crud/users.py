from sqlalchemy.orm import Session
from shiptrack.db.models.user import User

def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).one_or_none()

def get_user_by_name_in_department(db: Session, name: str, department_id: int) -> User | None:
    return (
        db.query(User)
        .filter(User.name == name.strip(), User.department_id == department_id)
        .order_by(User.id)
        .first()
    )
