from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiptrack.db.base import Base
from shiptrack.db.models._mixins import TimestampMixin

class Department(Base, TimestampMixin):
    __tablename__ = "department"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    code: Mapped[str | None] = mapped_column(String(10), unique=True, nullable=True)
    is_management: Mapped[bool] = mapped_column(Boolean, default=False)

    items = relationship("Item", back_populates="department")
    users = relationship("User", back_populates="department")
