"""
Document-store article backend.

Articles, comments, users and categories live in their own collections
keyed by string ids. Like, dislike and bookmark membership is held as
arrays of ids inside the owning document and changed with $addToSet and
$pull, which are atomic per document. Nothing here touches the relational
tables.
"""
import logging
import re
from collections import defaultdict
from datetime import datetime

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from newsroom.errors import BadRequestError, NotFoundError
from newsroom.models import UNKNOWN_AUTHOR
from newsroom.repositories.base import ArticleRepository
from newsroom.services.utils import PAGE_SIZE, page_offset

logger = logging.getLogger(__name__)

VISIBLE = {'status': {'$nin': ['draft', 'archived']}}
NEWEST_FIRST = [('createdAt', DESCENDING), ('_id', DESCENDING)]
OLDEST_FIRST = [('createdAt', ASCENDING), ('_id', ASCENDING)]
MOST_VIEWED = [('viewCount', DESCENDING), ('_id', DESCENDING)]


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


def _category(doc):
    return {
        'id': doc['_id'],
        'name': doc.get('name'),
        'slug': doc.get('slug'),
        'description': doc.get('description'),
    }


def author_from_document(user):
    if not user:
        return dict(UNKNOWN_AUTHOR)
    name = user.get('username') or \
        f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip() or 'Unknown'
    image = user.get('profileImageUrl') or ''
    return {
        'id': user['_id'],
        'name': name,
        'avatar': image,
        'profileImageUrl': image,
        'role': user.get('role') or '',
    }


class DocumentArticleRepository(ArticleRepository):

    realtime = True

    def __init__(self, database):
        self.db = database
        self.articles = database['articles']
        self.comments = database['comments']
        self.users = database['users']
        self.categories_collection = database['categories']
        self.views = database['articleViews']

    # ---------- view models ----------

    def _users(self, user_ids):
        user_ids = list({uid for uid in user_ids if uid})
        if not user_ids:
            return {}
        return {u['_id']: u for u in self.users.find({'_id': {'$in': user_ids}})}

    def _viewer_bookmarks(self, viewer_id):
        if not viewer_id:
            return set()
        user = self.users.find_one({'_id': viewer_id}, {'bookmarks': 1})
        return set(user.get('bookmarks', [])) if user else set()

    def _rows(self, docs, viewer_id=None, full=False):
        if not docs:
            return []
        ids = [d['_id'] for d in docs]
        category_ids = list({d.get('categoryId') for d in docs})
        categories = {c['_id']: c for c in self.categories_collection.find({'_id': {'$in': category_ids}})}
        authors = self._users(d.get('authorId') for d in docs)
        bookmarks = self._viewer_bookmarks(viewer_id)
        comment_counts = {
            row['_id']: row['count']
            for row in self.comments.aggregate([
                {'$match': {'articleId': {'$in': ids}}},
                {'$group': {'_id': '$articleId', 'count': {'$sum': 1}}},
            ])
        }

        rows = []
        for doc in docs:
            likes = doc.get('likes', [])
            category = categories.get(doc.get('categoryId'))
            row = {
                'id': doc['_id'],
                'title': doc.get('title'),
                'slug': doc.get('slug'),
                'excerpt': doc.get('excerpt'),
                'image': doc.get('image'),
                'authorId': doc.get('authorId'),
                'categoryId': doc.get('categoryId'),
                'status': doc.get('status', 'published'),
                'isBreaking': bool(doc.get('isBreaking')),
                'viewCount': doc.get('viewCount', 0),
                'createdAt': _iso(doc.get('createdAt')),
                'updatedAt': _iso(doc.get('updatedAt')),
                'category': _category(category) if category else None,
                'author': author_from_document(authors.get(doc.get('authorId'))),
                'likes': len(likes),
                'isLiked': bool(viewer_id) and viewer_id in likes,
                'isBookmarked': doc['_id'] in bookmarks,
                'commentsCount': comment_counts.get(doc['_id'], 0),
            }
            if full:
                row['content'] = doc.get('content')
            rows.append(row)
        return rows

    def _comment_node(self, comment, article, authors, viewer_id):
        likes = comment.get('likes', [])
        dislikes = comment.get('dislikes', [])
        author = author_from_document(authors.get(comment['authorId']))
        if comment.get('authorName'):
            author['name'] = comment['authorName']
        if comment.get('authorImage'):
            author['avatar'] = author['profileImageUrl'] = comment['authorImage']
        return {
            'id': comment['_id'],
            'content': comment.get('content'),
            'articleId': comment['articleId'],
            'parentId': comment.get('parentId'),
            'authorId': comment['authorId'],
            'createdAt': _iso(comment.get('createdAt')),
            'likes': len(likes),
            'dislikes': len(dislikes),
            'isAuthor': comment['authorId'] == article.get('authorId'),
            'author': author,
            'isLiked': bool(viewer_id) and viewer_id in likes,
            'isDisliked': bool(viewer_id) and viewer_id in dislikes,
        }

    def _comment_tree(self, article, viewer_id=None):
        approved = {'articleId': article['_id'], 'status': 'approved'}
        top_level = list(self.comments.find(dict(approved, parentId=None)).sort(NEWEST_FIRST))
        if not top_level:
            return []
        replies = list(self.comments.find(
            dict(approved, parentId={'$in': [c['_id'] for c in top_level]})
        ).sort(OLDEST_FIRST))
        authors = self._users(c['authorId'] for c in top_level + replies)

        replies_by_parent = defaultdict(list)
        for reply in replies:
            replies_by_parent[reply['parentId']].append(
                self._comment_node(reply, article, authors, viewer_id))

        tree = []
        for comment in top_level:
            node = self._comment_node(comment, article, authors, viewer_id)
            node['replies'] = replies_by_parent[comment['_id']]
            tree.append(node)
        return tree

    def _page(self, query, page, viewer_id, sort=NEWEST_FIRST):
        offset = page_offset(page)
        docs = list(self.articles.find(query).sort(sort).skip(offset).limit(PAGE_SIZE))
        probe = self.articles.find(query, {'_id': 1}).sort(sort).skip(offset + PAGE_SIZE).limit(1)
        return {'articles': self._rows(docs, viewer_id), 'hasMore': next(iter(probe), None) is not None}

    def _require_article(self, article_id):
        article = self.articles.find_one({'_id': article_id})
        if article is None:
            raise NotFoundError('Article not found')
        return article

    # ---------- reads ----------

    def get_article(self, article_id, viewer_id=None):
        article = self._require_article(article_id)
        view = self._rows([article], viewer_id, full=True)[0]
        view['tags'] = list(article.get('tags', []))
        view['comments'] = self._comment_tree(article, viewer_id)
        return view

    def featured_article(self, viewer_id=None):
        article = self.articles.find_one(dict(VISIBLE, isBreaking=True), sort=NEWEST_FIRST)
        if article is None:
            article = self.articles.find_one(VISIBLE, sort=MOST_VIEWED)
        if article is None:
            return None
        return self.get_article(article['_id'], viewer_id)

    def trending_articles(self, page=1, viewer_id=None):
        return self._page(VISIBLE, page, viewer_id, sort=MOST_VIEWED)

    def latest_articles(self, page=1, viewer_id=None):
        return self._page(VISIBLE, page, viewer_id)

    def articles_by_category(self, slug, page=1, viewer_id=None):
        category = self.categories_collection.find_one({'slug': slug})
        if category is None:
            raise NotFoundError('Category not found')
        result = self._page(dict(VISIBLE, categoryId=category['_id']), page, viewer_id)
        result['category'] = _category(category)
        return result

    def search_articles(self, q, page=1, viewer_id=None):
        if not q:
            return {'articles': [], 'hasMore': False, 'total': 0}
        pattern = {'$regex': re.escape(q), '$options': 'i'}
        query = dict(VISIBLE, **{'$or': [{field: pattern} for field in ('title', 'excerpt', 'content')]})
        total = self.articles.count_documents(query)
        offset = page_offset(page)
        docs = list(self.articles.find(query).sort(NEWEST_FIRST).skip(offset).limit(PAGE_SIZE))
        return {
            'articles': self._rows(docs, viewer_id),
            'hasMore': offset + PAGE_SIZE < total,
            'total': total,
        }

    def most_read_articles(self, limit=5):
        docs = self.articles.find(VISIBLE, {'title': 1, 'createdAt': 1, 'viewCount': 1}) \
            .sort(MOST_VIEWED).limit(limit)
        return [{
            'id': doc['_id'],
            'title': doc.get('title'),
            'createdAt': _iso(doc.get('createdAt')),
            'viewCount': doc.get('viewCount', 0),
        } for doc in docs]

    def popular_topics(self, limit=10):
        rows = self.articles.aggregate([
            {'$unwind': '$tags'},
            {'$group': {'_id': '$tags', 'count': {'$sum': 1}}},
            {'$sort': {'count': DESCENDING, '_id': ASCENDING}},
            {'$limit': limit},
        ])
        return [f"#{row['_id']}" for row in rows]

    def categories(self):
        return [_category(c) for c in self.categories_collection.find().sort('name', ASCENDING)]

    def user_interactions(self, article_id, user_id):
        article = self._require_article(article_id)
        return {
            'liked': user_id in article.get('likes', []),
            'bookmarked': article_id in self._viewer_bookmarks(user_id),
        }

    # ---------- reader mutations ----------

    def record_view(self, article_id, user_id=None, ip_address=None, user_agent=None):
        result = self.articles.update_one({'_id': article_id}, {'$inc': {'viewCount': 1}})
        if result.matched_count == 0:
            raise NotFoundError('Article not found')
        self.views.insert_one({
            'articleId': article_id,
            'userId': user_id,
            'ipAddress': ip_address,
            'userAgent': user_agent,
            'createdAt': datetime.utcnow(),
        })

    def set_article_like(self, article_id, user_id, liked):
        operator = '$addToSet' if liked else '$pull'
        result = self.articles.update_one({'_id': article_id}, {operator: {'likes': user_id}})
        if result.matched_count == 0:
            raise NotFoundError('Article not found')

    def set_article_bookmark(self, article_id, user_id, bookmarked):
        self._require_article(article_id)
        operator = '$addToSet' if bookmarked else '$pull'
        self.users.update_one({'_id': user_id}, {operator: {'bookmarks': article_id}}, upsert=bookmarked)

    def add_comment(self, article_id, user_id, content, parent_id=None):
        article = self._require_article(article_id)
        if parent_id is not None:
            parent = self.comments.find_one({'_id': parent_id}, {'articleId': 1})
            if parent is None or parent['articleId'] != article_id:
                raise BadRequestError('Parent comment does not belong to this article')

        user = self.users.find_one({'_id': user_id})
        author = author_from_document(user)
        now = datetime.utcnow()
        comment = {
            '_id': str(ObjectId()),
            'articleId': article_id,
            'authorId': user_id,
            'authorName': author['name'],
            'authorImage': author['avatar'],
            'parentId': parent_id,
            'content': content,
            'status': 'approved',
            'likes': [],
            'dislikes': [],
            'createdAt': now,
            'updatedAt': now,
        }
        self.comments.insert_one(comment)
        return self._comment_node(comment, article, {user_id: user}, user_id)

    def _toggle(self, comment_id, user_id, field, opposite):
        added = self.comments.update_one(
            {'_id': comment_id, field: {'$nin': [user_id]}},
            {'$addToSet': {field: user_id}, '$pull': {opposite: user_id}},
        )
        if added.matched_count:
            active = True
        else:
            removed = self.comments.update_one({'_id': comment_id}, {'$pull': {field: user_id}})
            if removed.matched_count == 0:
                raise NotFoundError('Comment not found')
            active = False
        comment = self.comments.find_one({'_id': comment_id}, {'likes': 1, 'dislikes': 1})
        return active, len(comment.get('likes', [])), len(comment.get('dislikes', []))

    def toggle_comment_like(self, comment_id, user_id):
        liked, likes, dislikes = self._toggle(comment_id, user_id, 'likes', 'dislikes')
        return {'liked': liked, 'likes': likes, 'dislikes': dislikes}

    def toggle_comment_dislike(self, comment_id, user_id):
        disliked, likes, dislikes = self._toggle(comment_id, user_id, 'dislikes', 'likes')
        return {'disliked': disliked, 'likes': likes, 'dislikes': dislikes}

    # ---------- realtime ----------

    def watch_article(self, article_id, viewer_id=None):
        """
        Yield the current view, then a fresh one after every change to the
        article document or to one of its comments. Requires a replica set.
        """
        self._require_article(article_id)
        pipeline = [{'$match': {'$or': [
            {'ns.coll': 'articles', 'documentKey._id': article_id},
            {'ns.coll': 'comments', 'fullDocument.articleId': article_id},
        ]}}]
        yield self.get_article(article_id, viewer_id)
        with self.db.watch(pipeline, full_document='updateLookup') as stream:
            for change in stream:
                logger.debug('Article %s changed (%s)', article_id, change.get('operationType'))
                yield self.get_article(article_id, viewer_id)
