"""Authentication routes, the per-request current user and RBAC decorators."""
import logging
from collections import namedtuple
from functools import wraps

from flask import Blueprint, abort, g, jsonify, redirect, session, url_for
from flask_babel import gettext as _

from newsroom.extensions import oauth
from newsroom.services.users import get_user, upsert_user

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

ADMIN_ROLES = ('admin', 'developer')

CurrentUser = namedtuple('CurrentUser', ['id', 'role'])


def is_admin(user):
    return user is not None and user.role in ADMIN_ROLES


@auth_bp.before_app_request
def load_current_user():
    """Resolve the session's user once per request."""
    g.current_user = None
    user_id = session.get('user_id')
    if user_id:
        user = get_user(user_id)
        if user is not None:
            g.current_user = CurrentUser(user.id, user.role)


def viewer_id():
    user = g.get('current_user')
    return user.id if user else None


# ==================== RBAC Decorators ====================

def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('current_user') is None:
            abort(401, description=_('Authentication required'))
        return f(*args, **kwargs)
    return decorated_function


def role_required(roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = g.get('current_user')
            if user is None:
                abort(401, description=_('Authentication required'))
            if user.role not in roles:
                abort(403, description=_('Insufficient permissions'))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    return role_required(ADMIN_ROLES)(f)


def developer_required(f):
    return role_required(['developer'])(f)


# ==================== OIDC session ====================

@auth_bp.route('/api/login')
def login():
    redirect_uri = url_for('auth.callback', _external=True)
    return oauth.oidc.authorize_redirect(redirect_uri)


@auth_bp.route('/api/callback')
def callback():
    token = oauth.oidc.authorize_access_token()
    claims = token.get('userinfo') or oauth.oidc.userinfo(token=token)
    if not claims or not claims.get('sub'):
        abort(401, description=_('Login failed'))

    user = upsert_user(claims)
    session.clear()
    session['user_id'] = user.id
    logger.info('User %s logged in', user.id)
    return redirect('/')


@auth_bp.route('/api/logout')
def logout():
    session.clear()
    return redirect('/')


@auth_bp.route('/api/auth/user')
@login_required
def current_user():
    return jsonify(get_user(g.current_user.id).to_dict())
