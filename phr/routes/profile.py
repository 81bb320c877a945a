# phr/routes/profile.py
import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from phr.decorators.auth import session_required
from phr.models.profile import BLOOD_TYPES
from phr.services.auth import AuthService
from phr.services.profile import ProfileService
from phr.services.schemas import ProfileForm, ValidationError, parse_form

logger = logging.getLogger(__name__)

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('/profile-setup', methods=['GET', 'POST'])
@session_required
def profile_setup():
    user = AuthService.get_current_user()

    if request.method == 'POST':
        try:
            form = parse_form(ProfileForm, request.form.to_dict())
            ProfileService.save_profile(user, form)
            flash('Profile saved', 'success')
            return redirect(url_for('dashboard.dashboard'))
        except ValidationError as e:
            flash(e.message, 'error')
        except Exception:
            logger.exception(f"Error saving profile for {user.id}")
            flash('Failed to save profile. Please try again.', 'error')
        return render_template('profile_setup.html', form=request.form, blood_types=BLOOD_TYPES), 400

    profile = ProfileService.get_profile(user.id)
    return render_template('profile_setup.html', form=profile, blood_types=BLOOD_TYPES)
