"""Comment routes - reactions, reports and author edits."""
from flask import Blueprint, g, jsonify

from newsroom.repositories import get_repository
from newsroom.routes.auth import is_admin, login_required
from newsroom.schemas import CommentUpdate, ReportCreate, load_body
from newsroom.services import comments as comment_service

comments_bp = Blueprint('comments', __name__)


@comments_bp.route('/api/comments/<comment_id>/like', methods=['POST'])
@login_required
def like(comment_id):
    return jsonify(get_repository().toggle_comment_like(comment_id, g.current_user.id))


@comments_bp.route('/api/comments/<comment_id>/dislike', methods=['POST'])
@login_required
def dislike(comment_id):
    return jsonify(get_repository().toggle_comment_dislike(comment_id, g.current_user.id))


@comments_bp.route('/api/comments/<int:comment_id>/report', methods=['POST'])
@login_required
def report(comment_id):
    body = load_body(ReportCreate)
    comment_service.report_comment(comment_id, g.current_user.id, body.reason)
    return jsonify(success=True)


@comments_bp.route('/api/comments/<int:comment_id>', methods=['PATCH'])
@login_required
def update(comment_id):
    body = load_body(CommentUpdate)
    comment = comment_service.update_comment(comment_id, g.current_user.id, body.content)
    return jsonify(comment.to_dict())


@comments_bp.route('/api/comments/<int:comment_id>', methods=['DELETE'])
@login_required
def delete(comment_id):
    comment_service.delete_comment(comment_id, g.current_user.id, is_admin(g.current_user))
    return jsonify(success=True)
