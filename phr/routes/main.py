# phr/routes/main.py
from flask import Blueprint, redirect, render_template, url_for

from phr.decorators.auth import GuardState, resolve_guard_state

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def landing():
    if resolve_guard_state() is GuardState.AUTHENTICATED:
        return redirect(url_for('dashboard.dashboard'))
    return render_template('landing.html')
