"""The reader-facing article backend interface."""
from abc import ABC, abstractmethod


class ArticleRepository(ABC):
    """
    Article reads and reader interactions, served by exactly one store.

    Ids cross this boundary as strings so that relational integer keys
    and document keys look the same to the HTTP layer. Every method
    raises NotFoundError for an unknown article or comment.
    """

    #: Whether watch_article() can push changes.
    realtime = False

    @abstractmethod
    def get_article(self, article_id, viewer_id=None):
        """Full article view model."""

    @abstractmethod
    def featured_article(self, viewer_id=None):
        """Newest breaking article, else the most viewed one, else None."""

    @abstractmethod
    def trending_articles(self, page=1, viewer_id=None):
        """Published articles, most viewed first: {articles, hasMore}."""

    @abstractmethod
    def latest_articles(self, page=1, viewer_id=None):
        """Published articles, newest first: {articles, hasMore}."""

    @abstractmethod
    def articles_by_category(self, slug, page=1, viewer_id=None):
        """Published articles of one category: {category, articles, hasMore}."""

    @abstractmethod
    def search_articles(self, q, page=1, viewer_id=None):
        """Substring search with a true total: {articles, hasMore, total}."""

    @abstractmethod
    def most_read_articles(self, limit=5):
        """[{id, title, createdAt, viewCount}] by view count."""

    @abstractmethod
    def popular_topics(self, limit=10):
        """Tag names prefixed with #, most used first."""

    @abstractmethod
    def categories(self):
        """All categories by name."""

    @abstractmethod
    def user_interactions(self, article_id, user_id):
        """{liked, bookmarked} for one reader."""

    @abstractmethod
    def record_view(self, article_id, user_id=None, ip_address=None, user_agent=None):
        """Log one view and bump the article's view count."""

    @abstractmethod
    def set_article_like(self, article_id, user_id, liked):
        """Make the like present or absent; repeating either is a no-op."""

    @abstractmethod
    def set_article_bookmark(self, article_id, user_id, bookmarked):
        """Make the bookmark present or absent; repeating either is a no-op."""

    @abstractmethod
    def add_comment(self, article_id, user_id, content, parent_id=None):
        """Store a comment and return its node."""

    @abstractmethod
    def toggle_comment_like(self, comment_id, user_id):
        """Flip the user's like, clearing a dislike: {liked, likes, dislikes}."""

    @abstractmethod
    def toggle_comment_dislike(self, comment_id, user_id):
        """Flip the user's dislike, clearing a like: {disliked, likes, dislikes}."""

    def watch_article(self, article_id, viewer_id=None):
        """
        Yield a fresh view model each time the article or its comments change.

        Stores without change notifications yield nothing; check realtime first.
        """
        return iter(())
