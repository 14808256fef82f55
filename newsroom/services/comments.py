"""Comment threading, reactions, reports and moderation."""
import logging

from sqlalchemy import func

from newsroom.errors import BadRequestError, ForbiddenError, NotFoundError
from newsroom.models import (
    db, Article, Comment, CommentDislike, CommentLike, CommentReport, COMMENT_STATUSES
)
from newsroom.services.admin import moderation_required
from newsroom.services.articles import author_badge, users_by_id
from newsroom.services.utils import insert_ignore

logger = logging.getLogger(__name__)

FLAG_THRESHOLD = 3
MODERATION_ACTIONS = {'approve': 'approved', 'reject': 'rejected', 'flag': 'flagged'}


def get_comment(comment_id):
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError('Comment not found')
    return comment


def create_comment(article_id, author_id, content, parent_id=None):
    if db.session.get(Article, article_id) is None:
        raise NotFoundError('Article not found')

    if parent_id is not None:
        parent = db.session.get(Comment, parent_id)
        if parent is None or parent.article_id != article_id:
            raise BadRequestError('Parent comment does not belong to this article')

    comment = Comment(
        content=content,
        article_id=article_id,
        author_id=author_id,
        parent_id=parent_id,
        status='pending' if moderation_required() else 'approved',
        likes=0,
        dislikes=0,
    )
    db.session.add(comment)
    db.session.commit()
    return comment


def update_comment(comment_id, user_id, content):
    comment = get_comment(comment_id)
    if comment.author_id != user_id:
        raise ForbiddenError('You can only edit your own comments')
    comment.content = content
    db.session.commit()
    return comment


def delete_comment(comment_id, user_id, is_admin=False):
    comment = get_comment(comment_id)
    if comment.author_id != user_id and not is_admin:
        raise ForbiddenError('You can only delete your own comments')
    db.session.delete(comment)
    db.session.commit()
    logger.info('Comment %s deleted by %s', comment_id, user_id)


# ========================================
# REACTIONS
# ========================================

def _bump(column, delta, comment_id):
    (Comment.query
     .filter_by(id=comment_id)
     .update({column: func.coalesce(column, 0) + delta}, synchronize_session=False))


def _toggle(comment_id, user_id, model, counter, opposite_model, opposite_counter):
    """
    Flip one reaction of a user on a comment.

    Join rows and counters change in the same transaction; setting a
    reaction clears the opposite one.
    """
    get_comment(comment_id)

    removed = model.query.filter_by(comment_id=comment_id, user_id=user_id).delete()
    if removed:
        _bump(counter, -removed, comment_id)
        active = False
    else:
        if insert_ignore(model, comment_id=comment_id, user_id=user_id):
            _bump(counter, 1, comment_id)
        cleared = opposite_model.query.filter_by(comment_id=comment_id, user_id=user_id).delete()
        if cleared:
            _bump(opposite_counter, -cleared, comment_id)
        active = True
    db.session.commit()

    return active, get_comment(comment_id)


def toggle_comment_like(comment_id, user_id):
    liked, comment = _toggle(comment_id, user_id, CommentLike, Comment.likes,
                             CommentDislike, Comment.dislikes)
    return {'liked': liked, 'likes': comment.likes or 0, 'dislikes': comment.dislikes or 0}


def toggle_comment_dislike(comment_id, user_id):
    disliked, comment = _toggle(comment_id, user_id, CommentDislike, Comment.dislikes,
                                CommentLike, Comment.likes)
    return {'disliked': disliked, 'likes': comment.likes or 0, 'dislikes': comment.dislikes or 0}


def report_comment(comment_id, user_id, reason=None):
    """Record a report; the third distinct reporter flags the comment."""
    comment = get_comment(comment_id)
    insert_ignore(CommentReport, comment_id=comment_id, user_id=user_id, reason=reason)

    reports = CommentReport.query.filter_by(comment_id=comment_id).count()
    if reports >= FLAG_THRESHOLD and comment.status not in ('flagged', 'rejected'):
        comment.status = 'flagged'
        logger.info('Comment %s flagged after %d reports', comment_id, reports)
    db.session.commit()
    return comment


# ========================================
# MODERATION
# ========================================

def moderate_comment(comment_id, action):
    status = MODERATION_ACTIONS.get(action)
    if status is None:
        raise BadRequestError('Invalid moderation action')

    comment = get_comment(comment_id)
    comment.status = status
    if status == 'rejected':
        # Direct replies only
        (Comment.query
         .filter_by(parent_id=comment.id)
         .update({Comment.status: 'rejected'}, synchronize_session=False))
    db.session.commit()
    logger.info('Comment %s %s', comment_id, status)
    return comment


def _moderation_rows(comments):
    authors = users_by_id(c.author_id for c in comments)
    article_ids = {c.article_id for c in comments}
    titles = dict(
        db.session.query(Article.id, Article.title).filter(Article.id.in_(article_ids)).all()
    ) if article_ids else {}

    rows = []
    for comment in comments:
        row = comment.to_dict()
        row['author'] = author_badge(authors.get(comment.author_id))
        row['article'] = {'id': comment.article_id, 'title': titles.get(comment.article_id, '')}
        rows.append(row)
    return rows


def get_comments_by_status(status, search=None):
    if status not in COMMENT_STATUSES:
        raise BadRequestError('Invalid comment status')
    query = Comment.query.filter(Comment.status == status)
    if search:
        query = query.filter(Comment.content.contains(search, autoescape=True))
    comments = query.order_by(Comment.created_at.desc(), Comment.id.desc()).all()
    return _moderation_rows(comments)


def get_comments_for_moderation(limit=5):
    comments = (Comment.query
                .filter(Comment.status == 'pending')
                .order_by(Comment.created_at.asc(), Comment.id.asc())
                .limit(limit)
                .all())
    return _moderation_rows(comments)
