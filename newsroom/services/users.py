"""User accounts, profiles, preferences and reader statistics."""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from newsroom.errors import BadRequestError, ConflictError, NotFoundError
from newsroom.models import (
    db, Article, ArticleLike, ArticleView, Bookmark, Comment, User, UserPreferences, ROLES
)
from newsroom.services.articles import build_article_rows

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES = {'newsletter': True, 'commentReplies': True, 'articleUpdates': True}


def get_user(user_id):
    if not user_id:
        return None
    return db.session.get(User, user_id)


def _require_user(user_id):
    user = get_user(user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


def upsert_user(claims):
    """Create or refresh a user from identity-provider claims; the role is kept."""
    user = get_user(claims['sub'])
    if user is None:
        user = User(id=claims['sub'], role='user')
        db.session.add(user)
    user.email = claims.get('email')
    user.first_name = claims.get('given_name')
    user.last_name = claims.get('family_name')
    if claims.get('picture'):
        user.profile_image_url = claims['picture']
    db.session.commit()
    return user


def get_user_profile(user_id):
    user = _require_user(user_id)
    profile = user.to_dict()
    profile['preferences'] = user.preferences.to_dict() if user.preferences else dict(DEFAULT_PREFERENCES)
    return profile


def update_user_profile(user_id, data):
    user = _require_user(user_id)
    if 'username' in data:
        user.username = data['username']
    if 'bio' in data:
        user.bio = data['bio']
    if 'profile_image_url' in data:
        user.profile_image_url = data['profile_image_url']
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Username is already taken')
    return user


def update_user_preferences(user_id, prefs):
    user = _require_user(user_id)
    preferences = user.preferences
    if preferences is None:
        preferences = UserPreferences(user_id=user.id)
        db.session.add(preferences)
    preferences.newsletter = prefs.get('newsletter', True)
    preferences.comment_replies = prefs.get('comment_replies', True)
    preferences.article_updates = prefs.get('article_updates', True)
    db.session.commit()
    return preferences


def get_user_stats(user_id):
    comments = Comment.query.filter_by(author_id=user_id).count()
    likes = ArticleLike.query.filter_by(user_id=user_id).count()
    bookmarks = Bookmark.query.filter_by(user_id=user_id).count()
    articles_read = (db.session.query(func.count(func.distinct(ArticleView.article_id)))
                     .filter(ArticleView.user_id == user_id)
                     .scalar())

    recent = (db.session.query(Comment, Article.title)
              .join(Article, Article.id == Comment.article_id)
              .filter(Comment.author_id == user_id)
              .order_by(Comment.created_at.desc(), Comment.id.desc())
              .limit(5)
              .all())

    return {
        'comments': comments,
        'likes': likes,
        'bookmarks': bookmarks,
        'articlesRead': articles_read or 0,
        'recentComments': [{
            'id': comment.id,
            'content': comment.content,
            'articleId': comment.article_id,
            'articleTitle': title,
            'createdAt': comment.created_at.isoformat() if comment.created_at else None,
        } for comment, title in recent],
    }


def get_user_bookmarks(user_id):
    articles = (Article.query
                .join(Bookmark, Bookmark.article_id == Article.id)
                .filter(Bookmark.user_id == user_id, Article.status == 'published')
                .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
                .all())
    return build_article_rows(articles, user_id)


def set_user_role(user_id, role):
    if role not in ROLES:
        raise BadRequestError(f'Invalid role: {role}')
    user = _require_user(user_id)
    user.role = role
    db.session.commit()
    logger.info('User %s is now %s', user_id, role)
    return user
