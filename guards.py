# guards.py
# Access gate: resolves the acting user from the Flask session or refuses

from functools import wraps

from flask import session

from errors import AuthorizationError
from extensions import db
from models import User


def current_user():
    user_id = session.get('user_id')
    if user_id is None:
        return None
    return db.session.get(User, user_id)


def require_auth():
    user = current_user()
    if user is None:
        raise AuthorizationError('Authentication required')
    return user


def require_admin():
    """Return the acting admin or raise AuthorizationError."""
    user = require_auth()
    if user.role != 'admin':
        raise AuthorizationError('Access denied: only administrators can perform this action')
    return user


def require_operator_or_admin():
    user = require_auth()
    if user.role not in ('admin', 'operator'):
        raise AuthorizationError('Access denied: insufficient permissions')
    return user


def _gate(check):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            check()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = _gate(require_admin)
operator_required = _gate(require_operator_or_admin)
