from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from phr.extensions import db
from .base import UuidMixin, utcnow


class VitalRecord(db.Model, UuidMixin):
    __tablename__ = 'vital_records'

    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    blood_pressure_systolic: Mapped[Optional[int]] = mapped_column()
    blood_pressure_diastolic: Mapped[Optional[int]] = mapped_column()
    blood_sugar: Mapped[Optional[float]] = mapped_column()  # mg/dL
    heart_rate: Mapped[Optional[int]] = mapped_column()
    recorded_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)

    def __repr__(self):
        return f'<VitalRecord {self.id} at {self.recorded_at}>'
