# schoollife/models/shared_value.py
from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from schoollife.db.base import Base

class SharedValue(Base):
    __tablename__ = "shared_values"

    # e.g. "savedSchoolCode", "timetableDateEditsJSON", "widgetReloadToken"
    key: Mapped[str] = mapped_column(String(120), primary_key=True)

    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )
