# phr/services/profile.py
import logging
from datetime import date

from sqlalchemy.exc import IntegrityError

from phr.extensions import db
from phr.models.base import utcnow
from phr.models.profile import Profile

logger = logging.getLogger(__name__)

DEFAULT_DATE_OF_BIRTH = date(2000, 1, 1)


class ProfileService:
    @staticmethod
    def get_profile(user_id):
        return db.session.get(Profile, user_id)

    @staticmethod
    def _default_profile(user, phone_number=None):
        return Profile(
            id=user.id,
            full_name=user.email_local_part or 'User',
            date_of_birth=DEFAULT_DATE_OF_BIRTH,
            phone_number=phone_number if phone_number is not None else (user.phone_number or ''),
        )

    @staticmethod
    def create_default_profile(user, phone_number=None):
        """Insert the placeholder profile created right after sign-up"""
        profile = ProfileService._default_profile(user, phone_number)
        try:
            db.session.add(profile)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return profile

    @staticmethod
    def ensure_profile(user):
        """Return the user's profile, creating the default one if absent.

        The insert relies on the primary key: when another request wins the
        race the IntegrityError is absorbed and the stored row re-fetched.
        """
        profile = ProfileService.get_profile(user.id)
        if profile:
            return profile

        try:
            return ProfileService.create_default_profile(user)
        except IntegrityError:
            logger.info(f"Profile for {user.id} created concurrently, re-fetching")
            db.session.expire_all()
            profile = ProfileService.get_profile(user.id)
            if profile is None:
                raise
            return profile

    @staticmethod
    def save_profile(user, form):
        """Upsert the profile keyed by the user's id"""
        profile = ProfileService.get_profile(user.id)
        if profile is None:
            profile = Profile(id=user.id)
            db.session.add(profile)

        for field, value in form.model_dump().items():
            setattr(profile, field, value)
        profile.updated_at = utcnow()

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return profile
