# phr/routes/dashboard.py
import logging

from flask import Blueprint, current_app, flash, render_template

from phr.decorators.auth import session_required
from phr.services.auth import AuthService
from phr.services.profile import ProfileService
from phr.services.vitals import VitalsService

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/dashboard')
@session_required
def dashboard():
    user = AuthService.get_current_user()
    profile = None
    vitals = []
    try:
        profile = ProfileService.ensure_profile(user)
        vitals = VitalsService.list_vitals(user.id, limit=current_app.config['DASHBOARD_VITALS_LIMIT'])
    except Exception:
        logger.exception(f"Error fetching dashboard data for {user.id}")
        flash('Failed to load your health summary', 'error')

    return render_template(
        'dashboard.html',
        profile=profile,
        vitals=vitals,
        latest=vitals[0] if vitals else None,
        chart_data=VitalsService.chart_series(vitals),
    )
