from newsroom.models import Article, ArticleTag, Category, Tag, User


def test_seed_db_is_idempotent(app, db):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-db'])
    assert result.exit_code == 0
    assert 'Seeded the database.' in result.output

    runner.invoke(args=['seed-db'])
    assert Category.query.count() == 8
    assert Tag.query.count() == 15
    assert Article.query.count() == 3
    assert ArticleTag.query.count() == 8
    assert db.session.get(User, 'admin').role == 'admin'


def test_seeded_breaking_article_is_featured(app, client):
    app.test_cli_runner().invoke(args=['seed-db'])
    featured = client.get('/api/articles/featured').get_json()
    assert featured['isBreaking'] is True
    assert featured['category']['slug'] == 'business'


def test_set_role(app, make_user, db):
    user = make_user()
    runner = app.test_cli_runner()

    result = runner.invoke(args=['set-role', user.id, 'developer'])
    assert result.exit_code == 0
    assert db.session.get(User, user.id).role == 'developer'

    result = runner.invoke(args=['set-role', user.id, 'emperor'])
    assert result.exit_code != 0
    assert 'Invalid role' in result.output

    result = runner.invoke(args=['set-role', 'nobody', 'admin'])
    assert result.exit_code != 0
