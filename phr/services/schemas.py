"""
Typed form schemas
Each form the views submit is parsed into one of these models and validated
before any database or storage call is made.
"""
from datetime import date
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from phr.models.document import DOCUMENT_CATEGORIES, DEFAULT_CATEGORY
from phr.models.profile import BLOOD_TYPES

PHONE_PATTERN = r'^\+?[1-9]\d{9,11}$'
PROFILE_PHONE_PATTERN = r'^\d{10}$'
NATIONAL_ID_PATTERN = r'^\d{12}$'
REQUIRED_MESSAGE = 'Please fill in all required fields'

# Inclusive physiological ranges for vital readings
VITAL_RANGES = {
    'blood_pressure_systolic': (70, 200),
    'blood_pressure_diastolic': (40, 130),
    'blood_sugar': (30, 600),
    'heart_rate': (40, 200),
}


class ValidationError(Exception):
    """Input rejected before any write; fields lists the offending names"""

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _is_missing(error) -> bool:
    return error['type'] == 'missing' or error.get('input') in (None, '')


def parse_form(model, data):
    """Build ``model`` from raw form data, translating pydantic errors."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = [err for err in e.errors() if err['loc']]
        missing = [str(err['loc'][0]) for err in errors if _is_missing(err)]
        if missing:
            raise ValidationError(REQUIRED_MESSAGE, missing) from e

        fields = []
        for error in errors:
            field = str(error['loc'][0])
            if field not in fields:
                fields.append(field)
        if not fields:
            raise ValidationError(REQUIRED_MESSAGE) from e
        messages = getattr(model, 'error_messages', {})
        message = messages.get(fields[0]) or f"Invalid value for {fields[0].replace('_', ' ')}"
        raise ValidationError(message, fields) from e


class SignUpForm(BaseModel):
    error_messages: ClassVar[Dict[str, str]] = {
        'email': 'Please enter a valid email',
        'phone_number': 'Please enter a valid phone number (10-12 digits)',
    }

    email: str = Field(..., max_length=255)
    password: str
    phone_number: str = Field(..., pattern=PHONE_PATTERN)

    @field_validator('email', 'phone_number', mode='before')
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        local, _, domain = value.partition('@')
        if not local or not domain:
            raise ValueError('Please enter a valid email')
        return value.lower()


class ProfileForm(BaseModel):
    error_messages: ClassVar[Dict[str, str]] = {
        'date_of_birth': 'Please enter a valid date of birth',
        'weight': 'Weight must be between 0 and 500 kg',
        'height': 'Height must be between 0 and 300 cm',
        'blood_type': 'Please select a valid blood type',
        'phone_number': 'Please enter a valid 10-digit phone number',
        'national_id': 'National ID number must be 12 digits',
    }

    full_name: str = Field(..., min_length=1, max_length=200)
    date_of_birth: date
    phone_number: str = Field(..., min_length=1, pattern=PROFILE_PHONE_PATTERN)
    weight: Optional[float] = Field(None, ge=0, le=500)
    height: Optional[float] = Field(None, ge=0, le=300)
    blood_type: Optional[str] = None
    national_id: Optional[str] = Field(None, pattern=NATIONAL_ID_PATTERN)

    @field_validator('full_name', 'phone_number', mode='before')
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('date_of_birth', 'weight', 'height', 'blood_type', 'national_id', mode='before')
    @classmethod
    def blank_optional(cls, value):
        return _blank_to_none(value)

    @field_validator('date_of_birth')
    @classmethod
    def not_in_future(cls, value):
        if value > date.today():
            raise ValueError('Date of birth cannot be in the future')
        return value

    @field_validator('blood_type')
    @classmethod
    def known_blood_type(cls, value):
        if value is not None and value not in BLOOD_TYPES:
            raise ValueError('Unknown blood type')
        return value


class VitalReading(BaseModel):
    error_messages: ClassVar[Dict[str, str]] = {
        'blood_pressure_systolic': 'Invalid systolic pressure (70-200)',
        'blood_pressure_diastolic': 'Invalid diastolic pressure (40-130)',
        'blood_sugar': 'Invalid blood sugar level (30-600)',
        'heart_rate': 'Invalid heart rate (40-200)',
    }

    blood_pressure_systolic: Optional[int] = Field(None, ge=70, le=200)
    blood_pressure_diastolic: Optional[int] = Field(None, ge=40, le=130)
    blood_sugar: Optional[float] = Field(None, ge=30, le=600)
    heart_rate: Optional[int] = Field(None, ge=40, le=200)

    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    def present_fields(self) -> List[str]:
        return [name for name, value in self.model_dump().items() if value is not None]


class DocumentUpload(BaseModel):
    error_messages: ClassVar[Dict[str, str]] = {
        'category': 'Please select a valid category',
    }

    title: str = Field(..., min_length=1, max_length=255)
    category: str = DEFAULT_CATEGORY
    notes: Optional[str] = None
    filename: str = Field(..., min_length=1)
    content_type: str = ''
    data: bytes

    @field_validator('title', 'filename', mode='before')
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('notes', mode='before')
    @classmethod
    def blank_notes(cls, value):
        return _blank_to_none(value)

    @field_validator('category')
    @classmethod
    def known_category(cls, value):
        if value not in DOCUMENT_CATEGORIES:
            raise ValueError('Unknown category')
        return value

    @property
    def size(self) -> int:
        return len(self.data)
