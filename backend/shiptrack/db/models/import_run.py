from enum import Enum
from sqlalchemy import String, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from shiptrack.db.base import Base
from shiptrack.db.models._mixins import TimestampMixin

class ImportStatus(str, Enum):
    processing = "PROCESSING"
    completed = "COMPLETED"
    failed = "FAILED"

class ImportRun(Base, TimestampMixin):
    __tablename__ = "import_run"

    id: Mapped[int] = mapped_column(primary_key=True)
    file_name: Mapped[str] = mapped_column(String(512))
    total_records: Mapped[int] = mapped_column(Integer, default=0)
    success_records: Mapped[int] = mapped_column(Integer, default=0)
    error_records: Mapped[int] = mapped_column(Integer, default=0)
    uploaded_by: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"), index=True)
    status: Mapped[str] = mapped_column(String(16), default=ImportStatus.processing.value)

    uploader = relationship("User")
    errors = relationship(
        "ImportRowError",
        back_populates="import_run",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ImportRowError.row_number",
    )
