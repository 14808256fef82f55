"""Main routes - health, language switching, categories and topics."""
from flask import Blueprint, current_app, jsonify, make_response, redirect, request

from newsroom.repositories import get_repository

main_bp = Blueprint('main', __name__)


@main_bp.route('/api/healthz')
def healthz():
    return jsonify(status='ok')


@main_bp.route('/api/set_language/<lang>')
def set_language(lang):
    if lang not in current_app.config['LANGUAGES']:
        lang = current_app.config['BABEL_DEFAULT_LOCALE']
    resp = make_response(redirect(request.referrer or '/'))
    resp.set_cookie('babel_translation', lang)
    return resp


@main_bp.route('/api/categories')
def categories():
    return jsonify(get_repository().categories())


@main_bp.route('/api/topics/popular')
def popular_topics():
    return jsonify(get_repository().popular_topics())
