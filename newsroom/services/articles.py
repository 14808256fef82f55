"""
Article aggregation service.

Assembles the denormalized article view models the frontend consumes:
an article row joined with its category, author badge, tags, approved
comment tree and per-viewer like/bookmark state. Per-row lookups are
batched, one query per concern for a whole page.
"""
import logging
from collections import defaultdict

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from newsroom.errors import BadRequestError, ConflictError, NotFoundError
from newsroom.models import (
    db, Article, ArticleLike, ArticleTag, ArticleView, Bookmark, Category, Comment,
    CommentDislike, CommentLike, Tag, User, UNKNOWN_AUTHOR
)
from newsroom.services.utils import PAGE_SIZE, insert_ignore, page_offset, slugify

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'excerpt', 'content', 'image', 'category_id', 'status', 'is_breaking')


# ========================================
# VIEW MODEL ASSEMBLY
# ========================================

def author_badge(user):
    return user.to_author_dict() if user is not None else dict(UNKNOWN_AUTHOR)


def users_by_id(user_ids):
    user_ids = {uid for uid in user_ids if uid}
    if not user_ids:
        return {}
    return {u.id: u for u in User.query.filter(User.id.in_(user_ids)).all()}


def _counts_by(column, ids):
    rows = (db.session.query(column, func.count())
            .filter(column.in_(ids))
            .group_by(column)
            .all())
    return dict(rows)


def _viewer_set(model, ids, viewer_id):
    if not viewer_id:
        return set()
    rows = (db.session.query(model.article_id)
            .filter(model.article_id.in_(ids), model.user_id == viewer_id)
            .all())
    return {row[0] for row in rows}


def build_article_rows(articles, viewer_id=None, full=False):
    """Turn a page of Article rows into view models."""
    if not articles:
        return []
    ids = [a.id for a in articles]

    like_counts = _counts_by(ArticleLike.article_id, ids)
    comment_counts = _counts_by(Comment.article_id, ids)
    liked = _viewer_set(ArticleLike, ids, viewer_id)
    bookmarked = _viewer_set(Bookmark, ids, viewer_id)

    category_ids = {a.category_id for a in articles}
    categories = {c.id: c for c in Category.query.filter(Category.id.in_(category_ids)).all()}
    authors = users_by_id(a.author_id for a in articles)

    rows = []
    for article in articles:
        row = article.to_dict()
        if not full:
            row.pop('content')
        category = categories.get(article.category_id)
        row.update({
            'category': category.to_dict() if category else None,
            'author': author_badge(authors.get(article.author_id)),
            'likes': like_counts.get(article.id, 0),
            'isLiked': article.id in liked,
            'isBookmarked': article.id in bookmarked,
            'commentsCount': comment_counts.get(article.id, 0),
        })
        rows.append(row)
    return rows


def article_tag_names(article_id):
    rows = (db.session.query(Tag.name)
            .join(ArticleTag, ArticleTag.tag_id == Tag.id)
            .filter(ArticleTag.article_id == article_id)
            .order_by(ArticleTag.id)
            .all())
    return [row[0] for row in rows]


def _comment_node(comment, article, authors, liked, disliked):
    node = comment.to_dict()
    node.pop('status')
    node.pop('updatedAt')
    node.update({
        'isAuthor': comment.author_id == article.author_id,
        'author': author_badge(authors.get(comment.author_id)),
        'isLiked': comment.id in liked,
        'isDisliked': comment.id in disliked,
    })
    return node


def _viewer_reactions(model, comment_ids, viewer_id):
    if not viewer_id or not comment_ids:
        return set()
    rows = (db.session.query(model.comment_id)
            .filter(model.comment_id.in_(comment_ids), model.user_id == viewer_id)
            .all())
    return {row[0] for row in rows}


def get_article_comments(article, viewer_id=None):
    """
    Approved comment forest of an article, exactly two levels deep.

    Top-level comments come newest first, each with its approved direct
    replies oldest first. Replies to replies are never fetched.
    """
    top_level = (Comment.query
                 .filter(Comment.article_id == article.id,
                         Comment.parent_id.is_(None),
                         Comment.status == 'approved')
                 .order_by(Comment.created_at.desc(), Comment.id.desc())
                 .all())
    if not top_level:
        return []

    replies = (Comment.query
               .filter(Comment.parent_id.in_([c.id for c in top_level]),
                       Comment.status == 'approved')
               .order_by(Comment.created_at.asc(), Comment.id.asc())
               .all())

    everything = top_level + replies
    comment_ids = [c.id for c in everything]
    authors = users_by_id(c.author_id for c in everything)
    liked = _viewer_reactions(CommentLike, comment_ids, viewer_id)
    disliked = _viewer_reactions(CommentDislike, comment_ids, viewer_id)

    replies_by_parent = defaultdict(list)
    for reply in replies:
        replies_by_parent[reply.parent_id].append(_comment_node(reply, article, authors, liked, disliked))

    tree = []
    for comment in top_level:
        node = _comment_node(comment, article, authors, liked, disliked)
        node['replies'] = replies_by_parent[comment.id]
        tree.append(node)
    return tree


def article_view(article, viewer_id=None):
    """Full view model of a single article."""
    view = build_article_rows([article], viewer_id, full=True)[0]
    view['tags'] = article_tag_names(article.id)
    view['comments'] = get_article_comments(article, viewer_id)
    return view


# ========================================
# READS
# ========================================

def _published():
    return Article.status == 'published'


def _latest_order():
    return (Article.created_at.desc(), Article.id.desc())


def _paginate(query, page, viewer_id):
    offset = page_offset(page)
    articles = query.offset(offset).limit(PAGE_SIZE).all()
    # Existence probe at the next offset instead of a count
    has_more = query.with_entities(Article.id).offset(offset + PAGE_SIZE).limit(1).first() is not None
    return {'articles': build_article_rows(articles, viewer_id), 'hasMore': has_more}


def get_article(article_id):
    article = db.session.get(Article, article_id)
    if article is None:
        raise NotFoundError('Article not found')
    return article


def get_article_by_id(article_id, viewer_id=None):
    return article_view(get_article(article_id), viewer_id)


def get_featured_article(viewer_id=None):
    """Newest breaking article, else the most viewed one."""
    article = (Article.query
               .filter(_published(), Article.is_breaking.is_(True))
               .order_by(*_latest_order())
               .first())
    if article is None:
        article = (Article.query
                   .filter(_published())
                   .order_by(Article.view_count.desc(), Article.id.desc())
                   .first())
    if article is None:
        return None
    return article_view(article, viewer_id)


def get_trending_articles(page=1, viewer_id=None):
    query = Article.query.filter(_published()).order_by(Article.view_count.desc(), Article.id.desc())
    return _paginate(query, page, viewer_id)


def get_latest_articles(page=1, viewer_id=None):
    query = Article.query.filter(_published()).order_by(*_latest_order())
    return _paginate(query, page, viewer_id)


def get_most_read_articles(limit=5):
    articles = (Article.query
                .filter(_published())
                .order_by(Article.view_count.desc(), Article.id.desc())
                .limit(limit)
                .all())
    return [{
        'id': a.id,
        'title': a.title,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
        'viewCount': a.view_count or 0,
    } for a in articles]


def get_categories():
    return Category.query.order_by(Category.name).all()


def get_category_by_slug(slug):
    category = Category.query.filter_by(slug=slug).first()
    if category is None:
        raise NotFoundError('Category not found')
    return category


def create_category(name, slug=None, description=None):
    category = Category(name=name, slug=slugify(slug or name, fallback='category'), description=description)
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('A category with this slug already exists')
    return category


def get_articles_by_category(slug, page=1, viewer_id=None):
    category = get_category_by_slug(slug)
    query = (Article.query
             .filter(Article.category_id == category.id, _published())
             .order_by(*_latest_order()))
    result = _paginate(query, page, viewer_id)
    result['category'] = category.to_dict()
    return result


def search_articles(q, page=1, viewer_id=None):
    """Substring search over title, excerpt and content with a true total."""
    if not q:
        return {'articles': [], 'hasMore': False, 'total': 0}

    query = Article.query.filter(
        _published(),
        or_(
            Article.title.contains(q, autoescape=True),
            Article.excerpt.contains(q, autoescape=True),
            Article.content.contains(q, autoescape=True),
        )
    )
    total = query.count()
    offset = page_offset(page)
    articles = query.order_by(*_latest_order()).offset(offset).limit(PAGE_SIZE).all()
    return {
        'articles': build_article_rows(articles, viewer_id),
        'hasMore': offset + PAGE_SIZE < total,
        'total': total,
    }


def get_popular_topics(limit=10):
    usage = func.count(ArticleTag.article_id)
    rows = (db.session.query(Tag.name, usage)
            .join(ArticleTag, ArticleTag.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name)
            .order_by(usage.desc(), Tag.name)
            .limit(limit)
            .all())
    return [f'#{name}' for name, _count in rows]


def get_user_article_interactions(article_id, user_id):
    liked = ArticleLike.query.filter_by(article_id=article_id, user_id=user_id).first() is not None
    bookmarked = Bookmark.query.filter_by(article_id=article_id, user_id=user_id).first() is not None
    return {'liked': liked, 'bookmarked': bookmarked}


# ========================================
# READER MUTATIONS
# ========================================

def record_article_view(article_id, user_id=None, ip_address=None, user_agent=None):
    get_article(article_id)
    db.session.add(ArticleView(article_id=article_id, user_id=user_id,
                               ip_address=ip_address, user_agent=user_agent))
    (Article.query
     .filter_by(id=article_id)
     .update({Article.view_count: func.coalesce(Article.view_count, 0) + 1},
             synchronize_session=False))
    db.session.commit()


def like_article(article_id, user_id):
    get_article(article_id)
    insert_ignore(ArticleLike, article_id=article_id, user_id=user_id)
    db.session.commit()


def unlike_article(article_id, user_id):
    ArticleLike.query.filter_by(article_id=article_id, user_id=user_id).delete()
    db.session.commit()


def bookmark_article(article_id, user_id):
    get_article(article_id)
    insert_ignore(Bookmark, article_id=article_id, user_id=user_id)
    db.session.commit()


def unbookmark_article(article_id, user_id):
    Bookmark.query.filter_by(article_id=article_id, user_id=user_id).delete()
    db.session.commit()


# ========================================
# EDITORIAL
# ========================================

def _require_category(category_id):
    if db.session.get(Category, category_id) is None:
        raise BadRequestError('Unknown category')


def set_article_tags(article_id, names):
    """Link tags by name, creating any tag seen for the first time."""
    for raw_name in names:
        name = raw_name.strip()
        if not name:
            continue
        slug = slugify(name, fallback='tag')
        tag = Tag.query.filter_by(slug=slug).first()
        if tag is None:
            tag = Tag(name=name, slug=slug)
            db.session.add(tag)
            db.session.flush()
        insert_ignore(ArticleTag, article_id=article_id, tag_id=tag.id)


def create_article(data, author_id):
    _require_category(data['category_id'])
    article = Article(
        title=data['title'],
        slug=slugify(data['title']),
        excerpt=data['excerpt'],
        content=data['content'],
        image=data['image'],
        author_id=author_id,
        category_id=data['category_id'],
        status=data.get('status', 'published'),
        is_breaking=data.get('is_breaking', False),
    )
    db.session.add(article)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('An article with this slug already exists')

    # Tags are attached after the article is stored; a failure here leaves
    # the article without its tags.
    if data.get('tags'):
        set_article_tags(article.id, data['tags'])
        db.session.commit()

    logger.info('Article %s created by %s', article.id, author_id)
    return article


def update_article(article_id, data):
    article = get_article(article_id)
    if 'category_id' in data:
        _require_category(data['category_id'])
    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(article, field, data[field])
    db.session.commit()

    if 'tags' in data:
        ArticleTag.query.filter_by(article_id=article.id).delete()
        set_article_tags(article.id, data['tags'] or [])
        db.session.commit()

    logger.info('Article %s updated', article.id)
    return article


def delete_article(article_id):
    article = get_article(article_id)
    db.session.delete(article)
    db.session.commit()
    logger.info('Article %s deleted', article_id)
