from datetime import datetime, timedelta

import pytest

from newsroom.errors import BadRequestError, ConflictError, NotFoundError
from newsroom.models import ArticleView, Bookmark, User
from newsroom.services import users as user_service
from newsroom.services.articles import bookmark_article, like_article


# ========================================
# SESSION AND IDENTITY
# ========================================

def test_current_user_requires_session(client, login, reader):
    resp = client.get('/api/auth/user')
    assert resp.status_code == 401
    assert resp.get_json() == {'message': 'Authentication required'}

    login(reader)
    body = client.get('/api/auth/user').get_json()
    assert body['id'] == 'reader'
    assert body['role'] == 'user'


def test_session_for_deleted_user_is_anonymous(client, login, make_user, db):
    ghost = make_user()
    login(ghost)
    db.session.delete(ghost)
    db.session.commit()
    assert client.get('/api/auth/user').status_code == 401


def test_logout_clears_session(client, login, reader):
    login(reader)
    assert client.get('/api/logout').status_code == 302
    assert client.get('/api/auth/user').status_code == 401


def test_upsert_user_keeps_role(app, make_user):
    make_user(role='admin', id='oidc|42', username='chief')
    user = user_service.upsert_user({
        'sub': 'oidc|42',
        'email': 'chief@example.com',
        'given_name': 'Ada',
        'family_name': 'Lovelace',
        'picture': 'https://img.example.com/ada.png',
    })
    assert user.role == 'admin'
    assert user.email == 'chief@example.com'
    assert user.profile_image_url == 'https://img.example.com/ada.png'

    created = user_service.upsert_user({'sub': 'oidc|43', 'given_name': 'New'})
    assert created.role == 'user'
    assert created.to_author_dict()['name'] == 'New'


def test_set_user_role(app, reader):
    assert user_service.set_user_role(reader.id, 'developer').role == 'developer'
    with pytest.raises(BadRequestError):
        user_service.set_user_role(reader.id, 'superuser')


# ========================================
# PROFILE AND PREFERENCES
# ========================================

def test_profile_has_default_preferences(client, login, reader):
    login(reader)
    profile = client.get('/api/user/profile').get_json()
    assert profile['username'] == 'reader'
    assert profile['preferences'] == {'newsletter': True, 'commentReplies': True, 'articleUpdates': True}


def test_update_profile(client, login, reader, make_user):
    make_user(username='taken')
    login(reader)

    resp = client.patch('/api/user/profile', json={'bio': 'Reads everything', 'username': 'night_owl'})
    assert resp.status_code == 200
    body = resp.get_json()
    assert (body['bio'], body['username']) == ('Reads everything', 'night_owl')

    assert client.patch('/api/user/profile', json={'username': 'taken'}).status_code == 409
    assert client.patch('/api/user/profile', json={'username': 'no spaces allowed'}).status_code == 400
    assert client.patch('/api/user/profile', json={'profileImageUrl': 'ftp://x'}).status_code == 400


def test_update_profile_conflict_in_service(app, reader, make_user):
    make_user(username='taken')
    with pytest.raises(ConflictError):
        user_service.update_user_profile(reader.id, {'username': 'taken'})


def test_preferences_upsert(client, login, reader):
    login(reader)
    resp = client.post('/api/user/preferences', json={'newsletter': False})
    assert resp.get_json() == {'newsletter': False, 'commentReplies': True, 'articleUpdates': True}

    client.post('/api/user/preferences', json={'newsletter': True, 'articleUpdates': False})
    profile = client.get('/api/user/profile').get_json()
    assert profile['preferences'] == {'newsletter': True, 'commentReplies': True, 'articleUpdates': False}


def test_user_routes_require_login(client):
    for url in ('/api/user/profile', '/api/user/bookmarks', '/api/user/stats'):
        assert client.get(url).status_code == 401


# ========================================
# STATS AND BOOKMARKS
# ========================================

def test_user_stats(client, login, reader, author, category, make_article, make_comment, db):
    first = make_article(author, category, title='First headline of the day')
    second = make_article(author, category)
    comments = [make_comment(first, reader) for _ in range(6)]
    like_article(first.id, reader.id)
    bookmark_article(second.id, reader.id)
    for article in (first, first, second):
        db.session.add(ArticleView(article_id=article.id, user_id=reader.id))
    db.session.commit()

    login(reader)
    stats = client.get('/api/user/stats').get_json()
    assert (stats['comments'], stats['likes'], stats['bookmarks'], stats['articlesRead']) == (6, 1, 1, 2)
    assert [c['id'] for c in stats['recentComments']] == [c.id for c in reversed(comments[1:])]
    assert stats['recentComments'][0]['articleTitle'] == 'First headline of the day'


def test_bookmarks_most_recent_first(client, login, reader, author, category, make_article, db):
    older = make_article(author, category)
    newer = make_article(author, category)
    draft = make_article(author, category, status='draft')
    for article in (newer, older, draft):
        bookmark_article(article.id, reader.id)

    # Bookmark times decide the order, not article age
    for n, bookmark in enumerate(Bookmark.query.order_by(Bookmark.id).all()):
        bookmark.created_at = datetime(2024, 6, 1) + timedelta(hours=n)
    db.session.commit()

    login(reader)
    rows = client.get('/api/user/bookmarks').get_json()
    assert [r['id'] for r in rows] == [older.id, newer.id]
    assert all(r['isBookmarked'] for r in rows)


def test_unknown_user_profile(app):
    with pytest.raises(NotFoundError):
        user_service.get_user_profile('nobody')
    assert User.query.count() == 0
