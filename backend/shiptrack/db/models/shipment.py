import datetime as dt
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiptrack.db.base import Base
from shiptrack.db.models._mixins import TimestampMixin

class Shipment(Base, TimestampMixin):
    __tablename__ = "shipment"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_shipment_quantity_positive"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("item.id", ondelete="RESTRICT"), index=True)
    quantity: Mapped[int] = mapped_column(Integer)

    sender_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"))
    shipment_department_id: Mapped[int] = mapped_column(ForeignKey("department.id", ondelete="RESTRICT"), index=True)
    destination_department_id: Mapped[int] = mapped_column(ForeignKey("department.id", ondelete="RESTRICT"), index=True)
    shipment_user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    tracking_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # null = not shipped yet; see services.shipments.lock
    shipped_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    created_by: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"))
    updated_by: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"))

    item = relationship("Item")
    sender = relationship("User", foreign_keys=[sender_id])
    shipment_department = relationship("Department", foreign_keys=[shipment_department_id])
    destination_department = relationship("Department", foreign_keys=[destination_department_id])
    shipment_user = relationship("User", foreign_keys=[shipment_user_id])
