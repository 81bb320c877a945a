# phr/routes/vitals.py
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for

from phr.decorators.auth import session_required
from phr.services.auth import AuthService
from phr.services.profile import ProfileService
from phr.services.schemas import ValidationError
from phr.services.vitals import VitalsService

logger = logging.getLogger(__name__)

vitals_bp = Blueprint('vitals', __name__)


@vitals_bp.route('/', methods=['GET', 'POST'], strict_slashes=False)
@session_required
def vitals():
    user = AuthService.get_current_user()

    if request.method == 'POST':
        try:
            profile = ProfileService.ensure_profile(user)
            VitalsService.record_vital(profile.id, request.form.to_dict())
            flash('Vital signs recorded', 'success')
            return redirect(url_for('vitals.vitals'))
        except ValidationError as e:
            flash(e.message, 'error')
            status = 400
        except Exception:
            logger.exception(f"Error saving vitals for {user.id}")
            flash('Failed to save vital signs', 'error')
            status = 500
    else:
        status = 200

    records = []
    try:
        records = VitalsService.list_vitals(user.id)
    except Exception:
        logger.exception(f"Error fetching vitals for {user.id}")
        flash('Failed to load vital records', 'error')

    return render_template(
        'vitals.html',
        vitals=records,
        form=request.form if request.method == 'POST' else {},
        chart_data=VitalsService.chart_series(records),
    ), status


@vitals_bp.route('/chart-data')
@session_required
def chart_data():
    user = AuthService.get_current_user()
    limit = request.args.get('limit', type=int)
    records = VitalsService.list_vitals(user.id, limit=limit)
    return jsonify({'success': True, 'data': VitalsService.chart_series(records)})
