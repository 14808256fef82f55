"""Article routes - reader listings, detail, interactions and editorial CRUD."""
from flask import Blueprint, Response, abort, g, json, jsonify, request, stream_with_context

from newsroom.repositories import get_repository
from newsroom.routes.auth import admin_required, login_required, viewer_id
from newsroom.schemas import (
    ArticleCreate, ArticleUpdate, BookmarkToggle, CommentCreate, LikeToggle, load_body
)
from newsroom.services import articles as article_service

articles_bp = Blueprint('articles', __name__)


def _page():
    return request.args.get('page', 1, type=int)


# ==================== LISTINGS ====================

@articles_bp.route('/api/articles/featured')
def featured():
    return jsonify(get_repository().featured_article(viewer_id()))


@articles_bp.route('/api/articles/trending')
def trending():
    return jsonify(get_repository().trending_articles(_page(), viewer_id()))


@articles_bp.route('/api/articles/latest')
def latest():
    return jsonify(get_repository().latest_articles(_page(), viewer_id()))


@articles_bp.route('/api/articles/most-read')
def most_read():
    return jsonify(get_repository().most_read_articles())


@articles_bp.route('/api/articles/search')
def search():
    q = request.args.get('q', '').strip()
    return jsonify(get_repository().search_articles(q, _page(), viewer_id()))


@articles_bp.route('/api/categories/<slug>/articles')
def by_category(slug):
    return jsonify(get_repository().articles_by_category(slug, _page(), viewer_id()))


# ==================== DETAIL ====================

@articles_bp.route('/api/articles/<article_id>')
def article_detail(article_id):
    return jsonify(get_repository().get_article(article_id, viewer_id()))


@articles_bp.route('/api/articles/<article_id>/events')
def article_events(article_id):
    """Server-sent events carrying the article view after each change."""
    repository = get_repository()
    if not repository.realtime:
        abort(404)
    viewer = viewer_id()
    repository.get_article(article_id, viewer)

    def stream():
        for view in repository.watch_article(article_id, viewer):
            yield f'data: {json.dumps(view)}\n\n'

    return Response(stream_with_context(stream()), mimetype='text/event-stream',
                    headers={'Cache-Control': 'no-cache'})


@articles_bp.route('/api/articles/<article_id>/user-interactions')
@login_required
def user_interactions(article_id):
    return jsonify(get_repository().user_interactions(article_id, g.current_user.id))


@articles_bp.route('/api/articles/<article_id>/view', methods=['POST'])
def record_view(article_id):
    get_repository().record_view(
        article_id,
        user_id=viewer_id(),
        ip_address=request.remote_addr,
        user_agent=request.headers.get('User-Agent'),
    )
    return jsonify(success=True)


# ==================== READER INTERACTIONS ====================

@articles_bp.route('/api/articles/<article_id>/like', methods=['POST'])
@login_required
def like(article_id):
    body = load_body(LikeToggle)
    get_repository().set_article_like(article_id, g.current_user.id, body.liked)
    return jsonify(success=True)


@articles_bp.route('/api/articles/<article_id>/bookmark', methods=['POST'])
@login_required
def bookmark(article_id):
    body = load_body(BookmarkToggle)
    get_repository().set_article_bookmark(article_id, g.current_user.id, body.bookmarked)
    return jsonify(success=True)


@articles_bp.route('/api/articles/<article_id>/comments', methods=['POST'])
@login_required
def add_comment(article_id):
    body = load_body(CommentCreate)
    node = get_repository().add_comment(article_id, g.current_user.id, body.content, body.parent_id)
    return jsonify(node), 201


# ==================== EDITORIAL ====================

@articles_bp.route('/api/articles', methods=['POST'])
@admin_required
def create_article():
    body = load_body(ArticleCreate)
    article = article_service.create_article(body.model_dump(), g.current_user.id)
    return jsonify(article_service.article_view(article, g.current_user.id)), 201


@articles_bp.route('/api/articles/<int:article_id>', methods=['PATCH'])
@admin_required
def update_article(article_id):
    body = load_body(ArticleUpdate)
    article = article_service.update_article(article_id, body.model_dump(exclude_unset=True, exclude_none=True))
    return jsonify(article_service.article_view(article, g.current_user.id))


@articles_bp.route('/api/articles/<int:article_id>', methods=['DELETE'])
@admin_required
def delete_article(article_id):
    article_service.delete_article(article_id)
    return jsonify(success=True)
