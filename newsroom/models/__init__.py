"""Models package - Re-exports all models for convenient importing."""
from newsroom.extensions import db
from newsroom.models.user import User, UserPreferences, ROLES, UNKNOWN_AUTHOR
from newsroom.models.article import (
    Category, Article, Tag, ArticleTag, ArticleLike, Bookmark, ArticleView, ARTICLE_STATUSES
)
from newsroom.models.comment import (
    Comment, CommentLike, CommentDislike, CommentReport, COMMENT_STATUSES
)
from newsroom.models.setting import Setting, SETTING_SECTIONS

__all__ = [
    'db', 'User', 'UserPreferences', 'Category', 'Article', 'Tag', 'ArticleTag',
    'ArticleLike', 'Bookmark', 'ArticleView', 'Comment', 'CommentLike', 'CommentDislike',
    'CommentReport', 'Setting', 'ROLES', 'UNKNOWN_AUTHOR', 'ARTICLE_STATUSES',
    'COMMENT_STATUSES', 'SETTING_SECTIONS',
]
