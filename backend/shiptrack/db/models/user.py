from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from enum import Enum

from shiptrack.db.base import Base
from shiptrack.db.models._mixins import TimestampMixin

class Role(str, Enum):
    department = "DEPARTMENT_USER"
    management = "MANAGEMENT_USER"

class User(Base, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100), index=True)
    department_id: Mapped[int] = mapped_column(ForeignKey("department.id", ondelete="RESTRICT"), index=True)
    role: Mapped[str] = mapped_column(String(32), default=Role.department.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    department = relationship("Department", back_populates="users")
