from sqlalchemy.orm import Session
from shiptrack.db.models.shipment import Shipment
from shiptrack.schemas.shipments import ShipmentIn

def add_shipment(db: Session, **values) -> Shipment:
    """Stage one shipment in the caller's transaction (no commit)."""
    s = Shipment(**values)
    db.add(s)
    db.flush()
    return s

def create_shipment(db: Session, data: ShipmentIn, user_id: int) -> Shipment:
    s = add_shipment(
        db,
        **data.model_dump(),
        sender_id=user_id,
        created_by=user_id,
        updated_by=user_id,
    )
    db.commit()
    db.refresh(s)
    return s

def update_shipment(db: Session, s: Shipment, data: ShipmentIn, user_id: int) -> Shipment:
    for field, value in data.model_dump().items():
        setattr(s, field, value)
    s.updated_by = user_id
    db.commit()
    db.refresh(s)
    return s

def delete_shipment(db: Session, s: Shipment) -> None:
    db.delete(s)
    db.commit()
