from .auth import AuthService, AuthError
from .schemas import ValidationError
from .storage import StorageService, TransferError
from .profile import ProfileService
from .vitals import VitalsService
from .documents import DocumentService, DocumentNotFound

__all__ = [
    'AuthService', 'AuthError',
    'ValidationError',
    'StorageService', 'TransferError',
    'ProfileService',
    'VitalsService',
    'DocumentService', 'DocumentNotFound',
]
