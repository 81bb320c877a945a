from .base import UuidMixin, TimestampMixin, StatusMixin
from .user import User
from .profile import Profile, BLOOD_TYPES
from .vital import VitalRecord
from .document import MedicalDocument, DOCUMENT_CATEGORIES, DEFAULT_CATEGORY

__all__ = [
    'UuidMixin', 'TimestampMixin', 'StatusMixin',
    'User', 'Profile', 'BLOOD_TYPES',
    'VitalRecord',
    'MedicalDocument', 'DOCUMENT_CATEGORIES', 'DEFAULT_CATEGORY',
]
