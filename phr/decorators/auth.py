# phr/decorators/auth.py
from enum import Enum
from functools import wraps

from flask import flash, g, redirect, url_for

from phr.services.auth import AuthService


class GuardState(Enum):
    LOADING = 'loading'
    AUTHENTICATED = 'authenticated'
    UNAUTHENTICATED = 'unauthenticated'


def resolve_guard_state():
    """Run the session check once per request and remember the outcome"""
    state = g.get('guard_state', GuardState.LOADING)
    if state is GuardState.LOADING:
        user = AuthService.get_current_user()
        state = GuardState.AUTHENTICATED if user else GuardState.UNAUTHENTICATED
        g.guard_state = state
    return state


def session_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if resolve_guard_state() is not GuardState.AUTHENTICATED:
            flash('Please log in to access this page.', 'error')
            return redirect(url_for('main.landing'))
        return f(*args, **kwargs)
    return decorated_function
