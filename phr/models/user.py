"""
Auth identity: one row per signed-up email
The id is the owner key every profile, vital and document row is scoped by
"""
from typing import Optional
from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phr.extensions import db
from .base import UuidMixin, TimestampMixin, StatusMixin, utcnow


class User(db.Model, UuidMixin, TimestampMixin, StatusMixin, UserMixin):
    __tablename__ = 'users'

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Sign-up metadata
    phone_number: Mapped[Optional[str]] = mapped_column(String(20))

    last_login: Mapped[Optional[datetime]] = mapped_column()
    login_count: Mapped[int] = mapped_column(default=0)

    profile: Mapped[Optional["Profile"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    def set_password(self, password: str) -> None:
        """Hash and set password"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches hash"""
        return check_password_hash(self.password_hash, password)

    def record_login(self) -> None:
        """Record successful login"""
        self.last_login = utcnow()
        self.login_count = (self.login_count or 0) + 1

    @property
    def email_local_part(self) -> str:
        return self.email.split('@')[0] if self.email else ''

    def __repr__(self) -> str:
        return f"<User {self.email}>"
