"""Relational article store backed by the service layer."""
from newsroom.errors import BadRequestError, NotFoundError
from newsroom.repositories.base import ArticleRepository
from newsroom.services import articles as article_service
from newsroom.services import comments as comment_service
from newsroom.services.articles import author_badge, get_article
from newsroom.services.users import get_user


def _int_id(value, what):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(f'{what} not found')


class SqlArticleRepository(ArticleRepository):

    def get_article(self, article_id, viewer_id=None):
        return article_service.get_article_by_id(_int_id(article_id, 'Article'), viewer_id)

    def featured_article(self, viewer_id=None):
        return article_service.get_featured_article(viewer_id)

    def trending_articles(self, page=1, viewer_id=None):
        return article_service.get_trending_articles(page, viewer_id)

    def latest_articles(self, page=1, viewer_id=None):
        return article_service.get_latest_articles(page, viewer_id)

    def articles_by_category(self, slug, page=1, viewer_id=None):
        return article_service.get_articles_by_category(slug, page, viewer_id)

    def search_articles(self, q, page=1, viewer_id=None):
        return article_service.search_articles(q, page, viewer_id)

    def most_read_articles(self, limit=5):
        return article_service.get_most_read_articles(limit)

    def popular_topics(self, limit=10):
        return article_service.get_popular_topics(limit)

    def categories(self):
        return [c.to_dict() for c in article_service.get_categories()]

    def user_interactions(self, article_id, user_id):
        article_id = _int_id(article_id, 'Article')
        get_article(article_id)
        return article_service.get_user_article_interactions(article_id, user_id)

    def record_view(self, article_id, user_id=None, ip_address=None, user_agent=None):
        article_service.record_article_view(_int_id(article_id, 'Article'), user_id,
                                            ip_address=ip_address, user_agent=user_agent)

    def set_article_like(self, article_id, user_id, liked):
        article_id = _int_id(article_id, 'Article')
        if liked:
            article_service.like_article(article_id, user_id)
        else:
            article_service.unlike_article(article_id, user_id)

    def set_article_bookmark(self, article_id, user_id, bookmarked):
        article_id = _int_id(article_id, 'Article')
        if bookmarked:
            article_service.bookmark_article(article_id, user_id)
        else:
            article_service.unbookmark_article(article_id, user_id)

    def add_comment(self, article_id, user_id, content, parent_id=None):
        article_id = _int_id(article_id, 'Article')
        if parent_id is not None:
            try:
                parent_id = int(parent_id)
            except ValueError:
                raise BadRequestError('Parent comment does not belong to this article')
        comment = comment_service.create_comment(article_id, user_id, content, parent_id)
        node = comment.to_dict()
        node['author'] = author_badge(get_user(user_id))
        node['isAuthor'] = get_article(article_id).author_id == user_id
        return node

    def toggle_comment_like(self, comment_id, user_id):
        return comment_service.toggle_comment_like(_int_id(comment_id, 'Comment'), user_id)

    def toggle_comment_dislike(self, comment_id, user_id):
        return comment_service.toggle_comment_dislike(_int_id(comment_id, 'Comment'), user_id)
