import datetime as dt
from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from shiptrack.utils.datetime import utcnow


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
