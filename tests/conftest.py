import itertools
from datetime import datetime, timedelta

import pytest

from newsroom import create_app
from newsroom.extensions import db as _db
from newsroom.models import Article, Category, Comment, Setting, User

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)

ARTICLE_BODY = '<p>' + 'Lorem ipsum dolor sit amet, consectetur adipiscing elit. ' * 3 + '</p>'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def login(client):
    """Put a user in the test client's session."""
    def _login(user):
        with client.session_transaction() as sess:
            sess['user_id'] = user.id
    return _login


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(role='user', **kwargs):
        n = next(counter)
        kwargs.setdefault('id', f'user-{n}')
        kwargs.setdefault('email', f'user{n}@example.com')
        kwargs.setdefault('username', f'user{n}')
        user = User(role=role, **kwargs)
        _db.session.add(user)
        _db.session.commit()
        return user
    return _make


@pytest.fixture
def make_category(app):
    counter = itertools.count(1)

    def _make(name=None, slug=None):
        n = next(counter)
        name = name or f'Category {n}'
        category = Category(name=name, slug=slug or name.lower().replace(' ', '-'))
        _db.session.add(category)
        _db.session.commit()
        return category
    return _make


@pytest.fixture
def make_article(app):
    """Articles get strictly increasing creation times unless one is given."""
    counter = itertools.count(1)

    def _make(author, category, **kwargs):
        n = next(counter)
        kwargs.setdefault('title', f'Article number {n} headline')
        kwargs.setdefault('slug', f'article-number-{n}')
        kwargs.setdefault('excerpt', f'Excerpt of article number {n}, long enough.')
        kwargs.setdefault('content', ARTICLE_BODY)
        kwargs.setdefault('image', f'https://img.example.com/{n}.jpg')
        kwargs.setdefault('status', 'published')
        kwargs.setdefault('created_at', BASE_TIME + timedelta(minutes=n))
        article = Article(author_id=author.id, category_id=category.id, **kwargs)
        _db.session.add(article)
        _db.session.commit()
        return article
    return _make


@pytest.fixture
def make_comment(app):
    counter = itertools.count(1)

    def _make(article, author, parent=None, **kwargs):
        n = next(counter)
        kwargs.setdefault('content', f'Comment {n}')
        kwargs.setdefault('status', 'approved')
        kwargs.setdefault('created_at', BASE_TIME + timedelta(minutes=n))
        comment = Comment(article_id=article.id, author_id=author.id,
                          parent_id=parent.id if parent else None,
                          likes=0, dislikes=0, **kwargs)
        _db.session.add(comment)
        _db.session.commit()
        return comment
    return _make


@pytest.fixture
def moderation_off(app):
    _db.session.add(Setting(section='general', key='requireModeration', value=False))
    _db.session.commit()


@pytest.fixture
def author(make_user):
    return make_user(role='admin', id='editor', username='editor')


@pytest.fixture
def reader(make_user):
    return make_user(id='reader', username='reader')


@pytest.fixture
def category(make_category):
    return make_category('Technology', 'technology')
