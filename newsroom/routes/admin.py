"""Admin routes - dashboard, categories, comment moderation, settings and maintenance."""
from flask import Blueprint, jsonify, request

from newsroom.routes.auth import admin_required, developer_required
from newsroom.schemas import CategoryCreate, SettingsUpdate, load_body
from newsroom.services import admin as admin_service
from newsroom.services import comments as comment_service
from newsroom.services.articles import create_category

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


# ==================== DASHBOARD ====================

@admin_bp.route('/metrics')
@admin_required
def metrics():
    return jsonify(admin_service.get_admin_metrics())


@admin_bp.route('/articles')
@admin_required
def articles():
    return jsonify(admin_service.get_admin_articles(
        page=request.args.get('page', 1, type=int),
        search=request.args.get('search', '').strip(),
        category=request.args.get('category', 'all'),
    ))


@admin_bp.route('/articles/recent')
@admin_required
def recent_articles():
    return jsonify(admin_service.get_recent_articles())


@admin_bp.route('/categories', methods=['POST'])
@admin_required
def add_category():
    body = load_body(CategoryCreate)
    category = create_category(body.name, body.slug, body.description)
    return jsonify(category.to_dict()), 201


# ==================== COMMENT MODERATION ====================

@admin_bp.route('/comments/moderation')
@admin_required
def moderation_queue():
    return jsonify(comment_service.get_comments_for_moderation())


@admin_bp.route('/comments/<status>')
@admin_required
def comments_by_status(status):
    search = request.args.get('search', '').strip()
    return jsonify(comment_service.get_comments_by_status(status, search))


@admin_bp.route('/comments/<int:comment_id>/<action>', methods=['POST'])
@admin_required
def moderate(comment_id, action):
    comment = comment_service.moderate_comment(comment_id, action)
    return jsonify(comment.to_dict())


# ==================== SETTINGS ====================

@admin_bp.route('/settings')
@admin_required
def settings():
    return jsonify(admin_service.get_settings())


@admin_bp.route('/settings/<section>', methods=['POST'])
@admin_required
def update_settings(section):
    body = load_body(SettingsUpdate)
    admin_service.update_settings(section, body.root)
    return jsonify(success=True)


# ==================== DEVELOPER MAINTENANCE ====================

@admin_bp.route('/cache/clear', methods=['POST'])
@developer_required
def clear_cache():
    admin_service.clear_translation_cache()
    return jsonify(success=True)


@admin_bp.route('/database/maintenance', methods=['POST'])
@developer_required
def database_maintenance():
    admin_service.run_database_maintenance()
    return jsonify(success=True)
