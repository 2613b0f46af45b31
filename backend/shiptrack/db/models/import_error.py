import datetime as dt
from sqlalchemy import DateTime, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from shiptrack.db.base import Base
from shiptrack.utils.datetime import utcnow

class ImportRowError(Base):
    __tablename__ = "import_row_error"

    id: Mapped[int] = mapped_column(primary_key=True)
    import_run_id: Mapped[int] = mapped_column(ForeignKey("import_run.id", ondelete="CASCADE"), index=True)
    row_number: Mapped[int] = mapped_column(Integer)
    error_message: Mapped[str] = mapped_column(Text)
    # the uploaded row exactly as decoded, for operators fixing the file
    row_data: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    import_run = relationship("ImportRun", back_populates="errors")
