import datetime as dt
from pydantic import Field, computed_field, field_validator

from shiptrack.schemas.base import CamelModel
from shiptrack.services.etl.validators import MAX_QUANTITY
from shiptrack.services.shipments.lock import is_shipment_locked
from shiptrack.utils.datetime import localize

class ShipmentIn(CamelModel):
    item_id: int
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)
    shipment_department_id: int
    destination_department_id: int
    shipment_user_id: int | None = None
    tracking_number: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)
    shipped_at: dt.datetime | None = None

    @field_validator("tracking_number", "notes")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("shipped_at")
    @classmethod
    def _to_utc(cls, v: dt.datetime | None) -> dt.datetime | None:
        return localize(v) if v is not None else None

class DepartmentRef(CamelModel):
    id: int
    name: str
    code: str | None = None

class ItemRef(CamelModel):
    id: int
    name: str
    unit: str | None = None

class UserRef(CamelModel):
    id: int
    name: str
    email: str

class ShipmentOut(CamelModel):
    id: int
    item_id: int
    item: ItemRef
    quantity: int
    sender_id: int
    sender: UserRef
    shipment_department_id: int
    shipment_department: DepartmentRef
    destination_department_id: int
    destination_department: DepartmentRef
    shipment_user_id: int | None = None
    shipment_user: UserRef | None = None
    tracking_number: str | None = None
    notes: str | None = None
    shipped_at: dt.datetime | None = None
    created_by: int
    updated_by: int
    created_at: dt.datetime
    updated_at: dt.datetime

    @computed_field
    @property
    def locked(self) -> bool:
        return is_shipment_locked(self.shipped_at)

class PaginationOut(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

class ShipmentListOut(CamelModel):
    data: list[ShipmentOut]
    pagination: PaginationOut
