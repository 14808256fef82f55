"""Dashboard metrics, the admin article listing and site settings."""
import calendar
import logging
import math
from datetime import datetime

from flask_babel import refresh
from sqlalchemy import or_, text

from newsroom.errors import BadRequestError
from newsroom.models import db, Article, ArticleView, Comment, Setting, User, SETTING_SECTIONS
from newsroom.services.articles import build_article_rows
from newsroom.services.utils import PAGE_SIZE, page_offset

logger = logging.getLogger(__name__)


# ========================================
# METRICS
# ========================================

def one_month_ago(now=None):
    """Same day and time one calendar month back, clamped to the month's end."""
    now = now or datetime.utcnow()
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def growth(new, total):
    """Percentage of new rows against the rows that existed before; 100 when there were none."""
    before = total - new
    if before <= 0:
        return 100
    return int(math.floor(new / before * 100 + 0.5))


def _count_split(model, since):
    total = model.query.count()
    new = model.query.filter(model.created_at > since).count()
    return total, growth(new, total)


def get_admin_metrics(now=None):
    since = one_month_ago(now)
    article_count, article_growth = _count_split(Article, since)
    comment_count, comment_growth = _count_split(Comment, since)
    user_count, user_growth = _count_split(User, since)
    page_views, views_growth = _count_split(ArticleView, since)
    return {
        'articleCount': article_count,
        'articleGrowth': article_growth,
        'commentCount': comment_count,
        'commentGrowth': comment_growth,
        'userCount': user_count,
        'userGrowth': user_growth,
        'pageViews': page_views,
        'viewsGrowth': views_growth,
    }


# ========================================
# ARTICLES
# ========================================

def get_admin_articles(page=1, search=None, category=None):
    """Every article regardless of status, with a true total for the pager."""
    query = Article.query
    if search:
        query = query.filter(or_(
            Article.title.contains(search, autoescape=True),
            Article.excerpt.contains(search, autoescape=True),
        ))
    if category and category != 'all':
        try:
            query = query.filter(Article.category_id == int(category))
        except ValueError:
            raise BadRequestError('Invalid category filter')

    total = query.count()
    articles = (query
                .order_by(Article.created_at.desc(), Article.id.desc())
                .offset(page_offset(page))
                .limit(PAGE_SIZE)
                .all())
    return {
        'articles': build_article_rows(articles),
        'totalPages': math.ceil(total / PAGE_SIZE),
        'total': total,
    }


def get_recent_articles(limit=3):
    articles = (Article.query
                .order_by(Article.created_at.desc(), Article.id.desc())
                .limit(limit)
                .all())
    return build_article_rows(articles)


# ========================================
# SETTINGS
# ========================================

def get_settings():
    result = {}
    for setting in Setting.query.order_by(Setting.section, Setting.key).all():
        result.setdefault(setting.section, {})[setting.key] = setting.value
    return result


def update_settings(section, data):
    if section not in SETTING_SECTIONS:
        raise BadRequestError('Invalid settings section')
    existing = {s.key: s for s in Setting.query.filter_by(section=section).all()}
    for key, value in data.items():
        setting = existing.get(key)
        if setting is None:
            db.session.add(Setting(section=section, key=key, value=value))
        else:
            setting.value = value
    db.session.commit()
    logger.info('Settings section %s updated (%s)', section, ', '.join(sorted(data)))


def moderation_required():
    """New comments wait for review unless general.requireModeration is off."""
    setting = Setting.query.filter_by(section='general', key='requireModeration').first()
    if setting is None:
        return True
    return setting.value not in (False, 'false')


# ========================================
# MAINTENANCE
# ========================================

def clear_translation_cache():
    refresh()
    logger.info('Translation cache cleared')


def run_database_maintenance():
    db.session.execute(text('ANALYZE'))
    db.session.commit()
    logger.info('Database statistics refreshed')
