from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from phr.extensions import db
from .base import UuidMixin, utcnow

DOCUMENT_CATEGORIES = ('Prescriptions', 'Lab Reports', 'Bills', 'Other')
DEFAULT_CATEGORY = 'Other'


class MedicalDocument(db.Model, UuidMixin):
    """Metadata row for an object stored in the documents bucket"""
    __tablename__ = 'medical_documents'

    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_CATEGORY)
    document_path: Mapped[str] = mapped_column(String(500), nullable=False)
    document_url: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(100))
    file_size: Mapped[Optional[int]] = mapped_column()
    notes: Mapped[Optional[str]] = mapped_column(Text)
    uploaded_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)

    # Set when the stored object is gone but the row could not be deleted
    needs_reconciliation: Mapped[bool] = mapped_column(default=False)

    @property
    def download_name(self) -> str:
        extension = self.document_path.rsplit('.', 1)[-1] if '.' in self.document_path else ''
        if extension and not self.title.lower().endswith('.' + extension.lower()):
            return f"{self.title}.{extension}"
        return self.title

    def __repr__(self) -> str:
        return f"<MedicalDocument {self.title} ({self.category})>"
