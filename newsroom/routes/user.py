"""Signed-in reader routes - profile, preferences, bookmarks and stats."""
from flask import Blueprint, g, jsonify

from newsroom.routes.auth import login_required
from newsroom.schemas import PreferencesUpdate, ProfileUpdate, load_body
from newsroom.services import users as user_service

user_bp = Blueprint('user', __name__, url_prefix='/api/user')


@user_bp.route('/profile')
@login_required
def profile():
    return jsonify(user_service.get_user_profile(g.current_user.id))


@user_bp.route('/profile', methods=['PATCH'])
@login_required
def update_profile():
    body = load_body(ProfileUpdate)
    user_service.update_user_profile(g.current_user.id, body.model_dump(exclude_unset=True))
    return jsonify(user_service.get_user_profile(g.current_user.id))


@user_bp.route('/preferences', methods=['POST'])
@login_required
def preferences():
    body = load_body(PreferencesUpdate)
    prefs = user_service.update_user_preferences(g.current_user.id, body.model_dump())
    return jsonify(prefs.to_dict())


@user_bp.route('/bookmarks')
@login_required
def bookmarks():
    return jsonify(user_service.get_user_bookmarks(g.current_user.id))


@user_bp.route('/stats')
@login_required
def stats():
    return jsonify(user_service.get_user_stats(g.current_user.id))
