from datetime import date
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phr.extensions import db
from .base import TimestampMixin

BLOOD_TYPES = ('A+', 'A-', 'B+', 'B-', 'O+', 'O-', 'AB+', 'AB-')


class Profile(db.Model, TimestampMixin):
    """Personal details; the primary key is the owning user's id"""
    __tablename__ = 'profiles'

    id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False, default='')

    weight: Mapped[Optional[float]] = mapped_column()  # kg
    height: Mapped[Optional[float]] = mapped_column()  # cm
    blood_type: Mapped[Optional[str]] = mapped_column(String(3))
    national_id: Mapped[Optional[str]] = mapped_column(String(20))

    user: Mapped["User"] = relationship(back_populates="profile")

    def __repr__(self):
        return f'<Profile for User {self.id}>'
