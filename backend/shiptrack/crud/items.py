from sqlalchemy.orm import Session
from shiptrack.db.models.item import Item

def get_item(db: Session, item_id: int) -> Item | None:
    return db.get(Item, item_id)

def get_item_by_name(db: Session, name: str, department_id: int | None = None) -> Item | None:
    q = db.query(Item).filter(Item.name == name.strip())
    if department_id is not None:
        q = q.filter(Item.department_id == department_id)
    return q.order_by(Item.id).first()
