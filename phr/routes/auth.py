# phr/routes/auth.py
import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from phr.services.auth import AuthError, AuthService
from phr.services.profile import ProfileService
from phr.services.schemas import SignUpForm, ValidationError, parse_form

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


def _auth_error(message, mode):
    flash(message, 'error')
    return render_template('landing.html', auth_mode=mode, email=request.form.get('email', '')), 400


@auth_bp.route('/signup', methods=['POST'])
def signup():
    email = request.form.get('email', '')
    password = request.form.get('password', '')

    try:
        AuthService.validate_password(password)
        form = parse_form(SignUpForm, request.form.to_dict())
        user = AuthService.sign_up(form.email, form.password, {'phone_number': form.phone_number})
    except (AuthError, ValidationError) as e:
        return _auth_error(str(e), 'signup')
    except Exception:
        logger.exception(f"Sign-up failed for {email}")
        return _auth_error('Registration failed due to a server error.', 'signup')

    try:
        ProfileService.create_default_profile(user, form.phone_number)
    except Exception:
        logger.exception(f"Profile creation error for {user.id}")
        AuthService.sign_out()
        return _auth_error('Failed to create profile. Please try again.', 'signup')

    return redirect(url_for('profile.profile_setup'))


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        AuthService.validate_password(request.form.get('password', ''))
        AuthService.sign_in(request.form.get('email', ''), request.form.get('password', ''))
    except AuthError as e:
        return _auth_error(str(e), 'login')
    except Exception:
        logger.exception("Sign-in failed")
        return _auth_error('An internal server error occurred. Please try again later.', 'login')

    return redirect(url_for('dashboard.dashboard'))


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    AuthService.sign_out()
    return redirect(url_for('main.landing'))
