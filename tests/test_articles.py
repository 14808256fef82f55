from datetime import datetime

import pytest

from newsroom.errors import BadRequestError, ConflictError, NotFoundError
from newsroom.models import Article, ArticleView, Comment, Tag
from newsroom.services import articles as article_service
from newsroom.services.utils import MAX_PAGE, PAGE_SIZE, page_offset, slugify
from tests.conftest import ARTICLE_BODY


def article_payload(**overrides):
    payload = {
        'title': 'Quantum chips reach room temperature',
        'excerpt': 'Researchers report a stable qubit at room temperature.',
        'content': ARTICLE_BODY,
        'image': 'https://img.example.com/quantum.jpg',
        'categoryId': None,
        'isBreaking': False,
    }
    payload.update(overrides)
    return payload


# ========================================
# FEATURED
# ========================================

def test_featured_prefers_breaking_then_most_viewed(client, login, author, db):
    login(author)
    resp = client.post('/api/admin/categories', json={'name': 'Technology'})
    assert resp.status_code == 201
    category = resp.get_json()
    assert category['slug'] == 'technology'

    resp = client.post('/api/articles', json=article_payload(categoryId=category['id'], isBreaking=True))
    assert resp.status_code == 201
    breaking_id = resp.get_json()['id']

    resp = client.post('/api/articles', json=article_payload(
        title='Markets rally after rate decision', categoryId=category['id']))
    popular_id = resp.get_json()['id']
    db.session.get(Article, popular_id).view_count = 500
    db.session.commit()

    featured = client.get('/api/articles/featured').get_json()
    assert featured['id'] == breaking_id
    assert featured['category']['slug'] == 'technology'

    resp = client.patch(f'/api/articles/{breaking_id}', json={'isBreaking': False})
    assert resp.status_code == 200

    featured = client.get('/api/articles/featured').get_json()
    assert featured['id'] == popular_id


def test_featured_is_null_without_articles(client):
    resp = client.get('/api/articles/featured')
    assert resp.status_code == 200
    assert resp.get_json() is None


def test_featured_ignores_drafts(app, author, category, make_article):
    make_article(author, category, is_breaking=True, status='draft')
    published = make_article(author, category, view_count=3)
    assert article_service.get_featured_article()['id'] == published.id


# ========================================
# LIKES AND BOOKMARKS
# ========================================

def test_like_round_trip(client, login, reader, author, category, make_article):
    article = make_article(author, category)
    login(reader)

    before = client.get(f'/api/articles/{article.id}').get_json()
    assert (before['likes'], before['isLiked']) == (0, False)

    assert client.post(f'/api/articles/{article.id}/like', json={'liked': True}).status_code == 200
    liked = client.get(f'/api/articles/{article.id}').get_json()
    assert (liked['likes'], liked['isLiked']) == (1, True)

    # Liking again is a no-op
    client.post(f'/api/articles/{article.id}/like', json={'liked': True})
    assert client.get(f'/api/articles/{article.id}').get_json()['likes'] == 1

    client.post(f'/api/articles/{article.id}/like', json={'liked': False})
    after = client.get(f'/api/articles/{article.id}').get_json()
    assert (after['likes'], after['isLiked']) == (0, False)


def test_bookmark_and_interactions(client, login, reader, author, category, make_article):
    article = make_article(author, category)
    login(reader)

    client.post(f'/api/articles/{article.id}/bookmark', json={'bookmarked': True})
    interactions = client.get(f'/api/articles/{article.id}/user-interactions').get_json()
    assert interactions == {'liked': False, 'bookmarked': True}

    client.post(f'/api/articles/{article.id}/bookmark', json={'bookmarked': False})
    interactions = client.get(f'/api/articles/{article.id}/user-interactions').get_json()
    assert interactions == {'liked': False, 'bookmarked': False}


def test_like_requires_login_and_a_valid_body(client, login, reader, author, category, make_article):
    article = make_article(author, category)
    assert client.post(f'/api/articles/{article.id}/like', json={'liked': True}).status_code == 401

    login(reader)
    resp = client.post(f'/api/articles/{article.id}/like', json={})
    assert resp.status_code == 400
    assert resp.get_json()['errors']


def test_like_unknown_article_is_404(client, login, reader):
    login(reader)
    assert client.post('/api/articles/999/like', json={'liked': True}).status_code == 404
    assert client.post('/api/articles/not-a-number/like', json={'liked': True}).status_code == 404


def test_anonymous_viewer_gets_false_flags(client, reader, author, category, make_article):
    article = make_article(author, category)
    article_service.like_article(article.id, reader.id)
    article_service.bookmark_article(article.id, reader.id)

    view = client.get(f'/api/articles/{article.id}').get_json()
    assert view['likes'] == 1
    assert view['isLiked'] is False
    assert view['isBookmarked'] is False

    row = client.get('/api/articles/latest').get_json()['articles'][0]
    assert row['isLiked'] is False and row['isBookmarked'] is False


def test_user_interactions_requires_login(client, author, category, make_article):
    article = make_article(author, category)
    assert client.get(f'/api/articles/{article.id}/user-interactions').status_code == 401


# ========================================
# PAGINATION
# ========================================

def _collect_pages(client, url):
    ids, page = [], 1
    while True:
        body = client.get(f'{url}?page={page}').get_json()
        assert len(body['articles']) <= 10
        ids.extend(a['id'] for a in body['articles'])
        if not body['hasMore']:
            return ids, page
        page += 1


def test_latest_pages_do_not_overlap(client, author, category, make_article):
    articles = [make_article(author, category) for _ in range(25)]

    ids, pages = _collect_pages(client, '/api/articles/latest')
    assert pages == 3
    assert ids == [a.id for a in reversed(articles)]

    assert client.get('/api/articles/latest?page=4').get_json() == {'articles': [], 'hasMore': False}


def test_exactly_one_full_page_has_no_more(client, author, category, make_article):
    for _ in range(10):
        make_article(author, category)
    body = client.get('/api/articles/latest').get_json()
    assert len(body['articles']) == 10
    assert body['hasMore'] is False


def test_identical_timestamps_still_paginate_cleanly(client, author, category, make_article):
    same_time = datetime(2024, 5, 1)
    articles = [make_article(author, category, created_at=same_time) for _ in range(15)]
    ids, _pages = _collect_pages(client, '/api/articles/latest')
    assert sorted(ids) == sorted(a.id for a in articles)
    assert len(set(ids)) == 15


def test_invalid_page_reads_as_first(client, author, category, make_article):
    article = make_article(author, category)
    for page in ('0', '-3', 'abc'):
        body = client.get(f'/api/articles/latest?page={page}').get_json()
        assert [a['id'] for a in body['articles']] == [article.id]


def test_huge_page_is_an_empty_page(client, author, category, make_article):
    make_article(author, category)
    huge = 99999999999999999999
    for url in (f'/api/articles/latest?page={huge}', f'/api/articles/trending?page={huge}',
                f'/api/articles/search?q=Article&page={huge}'):
        resp = client.get(url)
        assert resp.status_code == 200
        assert resp.get_json()['articles'] == []
        assert resp.get_json()['hasMore'] is False


@pytest.mark.parametrize('page, offset', [(1, 0), (3, 20), (10 ** 20, (MAX_PAGE - 1) * PAGE_SIZE)])
def test_page_offset_is_bounded(page, offset):
    assert page_offset(page) == offset


def test_trending_orders_by_views(client, author, category, make_article):
    low = make_article(author, category, view_count=5)
    high = make_article(author, category, view_count=50)
    mid = make_article(author, category, view_count=10)
    make_article(author, category, view_count=999, status='draft')

    body = client.get('/api/articles/trending').get_json()
    assert [a['id'] for a in body['articles']] == [high.id, mid.id, low.id]
    assert body['hasMore'] is False


def test_list_rows_carry_counts_not_content(client, reader, author, category, make_article, make_comment):
    article = make_article(author, category)
    make_comment(article, reader)
    make_comment(article, reader, status='pending')
    article_service.like_article(article.id, reader.id)

    row = client.get('/api/articles/latest').get_json()['articles'][0]
    assert row['commentsCount'] == 2
    assert row['likes'] == 1
    assert 'content' not in row
    assert row['author']['name'] == 'editor'
    assert row['category']['slug'] == 'technology'


def test_articles_by_category(client, author, category, make_category, make_article):
    other = make_category('Sports', 'sports')
    mine = make_article(author, category)
    make_article(author, other)

    body = client.get('/api/categories/technology/articles').get_json()
    assert body['category']['name'] == 'Technology'
    assert [a['id'] for a in body['articles']] == [mine.id]

    assert client.get('/api/categories/missing/articles').status_code == 404


def test_most_read(client, author, category, make_article):
    for views in (1, 7, 3, 9, 4, 8):
        make_article(author, category, view_count=views)
    rows = client.get('/api/articles/most-read').get_json()
    assert [r['viewCount'] for r in rows] == [9, 8, 7, 4, 3]
    assert set(rows[0]) == {'id', 'title', 'createdAt', 'viewCount'}


# ========================================
# SEARCH
# ========================================

def test_search_matches_any_text_field_with_true_total(client, author, category, make_article):
    by_title = make_article(author, category, title='Solar power breakthrough announced')
    by_excerpt = make_article(author, category, excerpt='Solar panels get cheaper every single year.')
    by_content = make_article(author, category, content=ARTICLE_BODY + '<p>Solar</p>')
    make_article(author, category, title='Solar draft piece here', status='draft')
    make_article(author, category)

    body = client.get('/api/articles/search?q=Solar').get_json()
    assert body['total'] == 3
    assert body['hasMore'] is False
    assert {a['id'] for a in body['articles']} == {by_title.id, by_excerpt.id, by_content.id}


def test_search_total_is_independent_of_page(client, author, category, make_article):
    for n in range(13):
        make_article(author, category, title=f'Election coverage part {n}')

    first = client.get('/api/articles/search?q=Election').get_json()
    second = client.get('/api/articles/search?q=Election&page=2').get_json()
    assert first['total'] == second['total'] == 13
    assert (len(first['articles']), first['hasMore']) == (10, True)
    assert (len(second['articles']), second['hasMore']) == (3, False)


def test_search_treats_wildcards_literally(client, author, category, make_article):
    make_article(author, category, title='Fifty percent of voters undecided')
    percent = make_article(author, category, title='Turnout reached 100% in one district')

    body = client.get('/api/articles/search?q=%25').get_json()
    assert [a['id'] for a in body['articles']] == [percent.id]


def test_empty_search(client):
    assert client.get('/api/articles/search?q=').get_json() == {'articles': [], 'hasMore': False, 'total': 0}


# ========================================
# DETAIL AND COMMENT TREE
# ========================================

def test_comment_tree_is_two_levels(app, reader, author, category, make_article, make_comment):
    article = make_article(author, category)
    first = make_comment(article, reader)
    second = make_comment(article, author)
    reply_a = make_comment(article, author, parent=first)
    reply_b = make_comment(article, reader, parent=first)
    make_comment(article, reader, parent=reply_a)
    make_comment(article, reader, status='pending')
    make_comment(article, reader, parent=second, status='rejected')

    tree = article_service.get_article_by_id(article.id, reader.id)['comments']

    assert [node['id'] for node in tree] == [second.id, first.id]
    assert tree[0]['replies'] == []
    assert [r['id'] for r in tree[1]['replies']] == [reply_a.id, reply_b.id]
    for node in tree:
        for reply in node['replies']:
            assert reply['parentId'] == node['id']
            assert 'replies' not in reply

    assert tree[0]['isAuthor'] is True
    assert tree[1]['isAuthor'] is False
    assert tree[1]['author']['name'] == 'reader'


def test_comment_nodes_carry_viewer_reactions(client, login, reader, author, category, make_article, make_comment):
    from newsroom.services.comments import toggle_comment_like
    article = make_article(author, category)
    comment = make_comment(article, author)
    toggle_comment_like(comment.id, reader.id)

    login(reader)
    node = client.get(f'/api/articles/{article.id}').get_json()['comments'][0]
    assert (node['likes'], node['isLiked'], node['isDisliked']) == (1, True, False)


def test_article_detail_shows_drafts_and_tags(app, author, category):
    article = article_service.create_article({
        'title': 'Draft about artificial intelligence',
        'excerpt': 'An excerpt that is long enough.',
        'content': ARTICLE_BODY,
        'image': 'https://img.example.com/ai.jpg',
        'category_id': category.id,
        'status': 'draft',
        'tags': ['AI', 'Space', ' AI ', ''],
    }, author.id)

    view = article_service.get_article_by_id(article.id)
    assert view['status'] == 'draft'
    assert view['tags'] == ['AI', 'Space']
    assert view['content'] == ARTICLE_BODY


def test_unknown_article_is_404(client):
    assert client.get('/api/articles/12345').status_code == 404
    assert client.get('/api/articles/abc').status_code == 404
    assert client.get('/api/articles/12345').get_json() == {'message': 'Article not found'}


# ========================================
# VIEWS
# ========================================

def test_record_view_appends_and_counts(client, login, reader, author, category, make_article, db):
    article = make_article(author, category)

    client.post(f'/api/articles/{article.id}/view', headers={'User-Agent': 'pytest-agent'})
    login(reader)
    client.post(f'/api/articles/{article.id}/view')

    assert db.session.get(Article, article.id).view_count == 2
    views = ArticleView.query.filter_by(article_id=article.id).order_by(ArticleView.id).all()
    assert [v.user_id for v in views] == [None, reader.id]
    assert views[0].user_agent == 'pytest-agent'


def test_record_view_unknown_article(client):
    assert client.post('/api/articles/404/view').status_code == 404


# ========================================
# EDITORIAL
# ========================================

def test_create_article_requires_admin(client, login, reader, category):
    payload = article_payload(categoryId=category.id)
    assert client.post('/api/articles', json=payload).status_code == 401
    login(reader)
    assert client.post('/api/articles', json=payload).status_code == 403


def test_invalid_article_is_rejected_before_writing(client, login, author, category):
    login(author)
    for bad in ({'title': 'short'}, {'image': 'not a url'}, {'categoryId': 0},
                {'content': 'too short'}, {'status': 'deleted'}):
        resp = client.post('/api/articles', json=article_payload(**{'categoryId': category.id, **bad}))
        assert resp.status_code == 400
    assert Article.query.count() == 0


def test_unknown_category_is_bad_request(app, author):
    with pytest.raises(BadRequestError):
        article_service.create_article({
            'title': 'Headline with no category',
            'excerpt': 'An excerpt that is long enough.',
            'content': ARTICLE_BODY,
            'image': 'https://img.example.com/x.jpg',
            'category_id': 42,
        }, author.id)


def test_duplicate_title_conflicts(client, login, author, category):
    login(author)
    payload = article_payload(categoryId=category.id)
    assert client.post('/api/articles', json=payload).status_code == 201
    assert client.post('/api/articles', json=payload).status_code == 409
    assert Article.query.count() == 1


def test_update_changes_only_supplied_fields(client, login, author, category, make_article, db):
    article = make_article(author, category, title='Original headline here', is_breaking=True)
    article_service.set_article_tags(article.id, ['Economy', 'World'])
    db.session.commit()

    login(author)
    resp = client.patch(f'/api/articles/{article.id}', json={'excerpt': 'A brand new excerpt for this one.',
                                                             'tags': ['Climate']})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['title'] == 'Original headline here'
    assert body['isBreaking'] is True
    assert body['excerpt'] == 'A brand new excerpt for this one.'
    assert body['tags'] == ['Climate']


def test_delete_article_removes_dependents(client, login, reader, author, category, make_article, make_comment):
    article = make_article(author, category)
    parent = make_comment(article, reader)
    make_comment(article, reader, parent=parent)
    article_service.like_article(article.id, reader.id)

    login(author)
    assert client.delete(f'/api/articles/{article.id}').status_code == 200
    assert Article.query.count() == 0
    assert Comment.query.count() == 0
    with pytest.raises(NotFoundError):
        article_service.get_article(article.id)


def test_create_category_conflict(app):
    article_service.create_category('World News')
    with pytest.raises(ConflictError):
        article_service.create_category('World news', slug='world-news')


def test_categories_and_popular_topics(client, author, category, make_category, make_article, db):
    make_category('Business', 'business')
    first = make_article(author, category)
    second = make_article(author, category)
    article_service.set_article_tags(first.id, ['AI', 'Space'])
    article_service.set_article_tags(second.id, ['AI'])
    db.session.commit()

    names = [c['name'] for c in client.get('/api/categories').get_json()]
    assert names == ['Business', 'Technology']
    assert client.get('/api/topics/popular').get_json() == ['#AI', '#Space']


def test_symbol_only_tags_stay_distinct(app, author, category, make_article, db):
    first = make_article(author, category)
    second = make_article(author, category)
    article_service.set_article_tags(first.id, ['C++'])
    article_service.set_article_tags(second.id, ['C#'])
    db.session.commit()

    assert article_service.article_tag_names(second.id) == ['C#']
    assert Tag.query.count() == 2


@pytest.mark.parametrize('text, slug', [
    ('C++', 'c-plus-plus'),
    ('C#', 'c-sharp'),
    ('Café au lait', 'cafe-au-lait'),
    ('COVID-19', 'covid-19'),
    ('!!!', 'article'),
])
def test_slugify(text, slug):
    assert slugify(text) == slug
