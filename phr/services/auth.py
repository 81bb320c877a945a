# phr/services/auth.py
import logging

from flask_login import current_user, login_user, logout_user
from sqlalchemy.exc import IntegrityError

from phr.extensions import db
from phr.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    pass


class AuthService:
    @staticmethod
    def validate_password(password):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')

    @staticmethod
    def sign_up(email, password, metadata=None):
        """Create an auth identity and start its session.

        The caller creates the profile in a separate follow-up call.
        """
        AuthService.validate_password(password)
        email = (email or '').strip().lower()
        metadata = metadata or {}

        if User.query.filter_by(email=email).first():
            raise AuthError('User already registered')

        user = User(email=email, phone_number=metadata.get('phone_number'))
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise AuthError('User already registered') from e
        except Exception:
            db.session.rollback()
            raise

        login_user(user)
        logger.info(f"Signed up {user.id}")
        return user

    @staticmethod
    def sign_in(email, password):
        email = (email or '').strip().lower()
        user = User.query.filter_by(email=email).first()

        if not user or not password or not user.check_password(password):
            raise AuthError('Invalid login credentials')

        if not user.is_active:
            raise AuthError('Your account has been disabled. Please contact support.')

        user.record_login()
        db.session.commit()
        login_user(user)
        return user

    @staticmethod
    def sign_out():
        # logout_user is a no-op for anonymous sessions
        logout_user()

    @staticmethod
    def get_current_user():
        if current_user and current_user.is_authenticated:
            return current_user._get_current_object()
        return None
