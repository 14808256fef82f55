"""Initial data for a fresh database: admin account, categories, tags and sample articles."""
import logging

from newsroom.models import db, Article, ArticleTag, Category, Tag, User
from newsroom.services.utils import slugify

logger = logging.getLogger(__name__)

ADMIN_ID = 'admin'

CATEGORIES = [
    ('Politics', 'Latest political news and updates'),
    ('Business', 'Business and economic news'),
    ('Technology', 'Latest tech updates and innovations'),
    ('Health', 'Health and wellness articles'),
    ('Entertainment', 'Entertainment and celebrity news'),
    ('Sports', 'Sports news and match updates'),
    ('Science', 'Scientific discoveries and research'),
    ('Environment', 'Climate and environmental news'),
]

TAGS = [
    'World', 'Local', 'Finance', 'AI', 'Election', 'Climate', 'Health', 'COVID-19',
    'Innovation', 'Space', 'Markets', 'Education', 'Policy', 'Economy', 'Hollywood',
]

SAMPLE_ARTICLES = [
    {
        'title': 'Global Economy Faces Unprecedented Challenges Amid Shifting Geopolitical Landscape',
        'excerpt': 'World economic leaders gather to address growing concerns about inflation, '
                   'supply chain issues, and trade tensions.',
        'content': '<p>Finance ministers from G20 nations acknowledged the complex challenges facing '
                   'the global economy at a summit that concluded yesterday, against a backdrop of '
                   'rising inflation and persistent supply chain disruptions.</p>'
                   '<p>The summit ended with a joint statement on keeping trade channels open and '
                   'supporting vulnerable economies, although concrete plans remained vague.</p>',
        'image': 'https://source.unsplash.com/random/1200x800/?economy,business',
        'category': 'business',
        'is_breaking': True,
        'tags': ['Economy', 'Markets', 'World'],
    },
    {
        'title': 'Breakthrough in Quantum Computing Promises to Revolutionize Data Processing',
        'excerpt': 'Scientists achieve stable quantum entanglement at room temperature, potentially '
                   'making quantum computers more practical for everyday use.',
        'content': '<p>Researchers have demonstrated a method for maintaining quantum coherence at '
                   'room temperature for over 10 milliseconds, a thousand-fold improvement over '
                   'previous efforts.</p>'
                   '<p>Potential applications range from drug discovery to logistics optimisation '
                   'and climate modelling.</p>',
        'image': 'https://source.unsplash.com/random/1200x800/?quantum,technology',
        'category': 'technology',
        'is_breaking': False,
        'tags': ['AI', 'Innovation'],
    },
    {
        'title': 'Climate Summit Yields Historic Agreement on Carbon Emissions Reduction',
        'excerpt': 'After marathon negotiations, 196 countries commit to an accelerated timeline for '
                   'cutting greenhouse gas emissions.',
        'content': '<p>The climate conference concluded today with an agreement committing 196 '
                   'countries to reduce carbon emissions by 60% from 2010 levels by 2035.</p>'
                   '<p>Negotiators described the accord as a fundamental shift in global climate '
                   'diplomacy.</p>',
        'image': 'https://source.unsplash.com/random/1200x800/?climate,environment',
        'category': 'environment',
        'is_breaking': False,
        'tags': ['Climate', 'Policy', 'World'],
    },
]


def seed_database():
    """Insert whatever initial data is missing. Safe to run repeatedly."""
    admin = db.session.get(User, ADMIN_ID)
    if admin is None:
        logger.info('Creating admin user')
        admin = User(
            id=ADMIN_ID,
            email='admin@example.com',
            first_name='Admin',
            last_name='User',
            username='admin',
            role='admin',
            profile_image_url='https://ui-avatars.com/api/?name=Admin+User&background=1A237E&color=fff',
        )
        db.session.add(admin)

    if Category.query.count() == 0:
        logger.info('Creating categories')
        for name, description in CATEGORIES:
            db.session.add(Category(name=name, slug=slugify(name), description=description))

    if Tag.query.count() == 0:
        logger.info('Creating tags')
        for name in TAGS:
            db.session.add(Tag(name=name, slug=slugify(name, fallback='tag')))

    db.session.commit()

    if Article.query.count() == 0:
        logger.info('Creating sample articles')
        categories = {c.slug: c for c in Category.query.all()}
        tags = {t.name: t for t in Tag.query.all()}
        fallback = next(iter(categories.values()))
        for sample in SAMPLE_ARTICLES:
            category = categories.get(sample['category'], fallback)
            article = Article(
                title=sample['title'],
                slug=slugify(sample['title']),
                excerpt=sample['excerpt'],
                content=sample['content'],
                image=sample['image'],
                author_id=admin.id,
                category_id=category.id,
                status='published',
                is_breaking=sample['is_breaking'],
            )
            db.session.add(article)
            db.session.flush()
            for tag_name in sample['tags']:
                if tag_name in tags:
                    db.session.add(ArticleTag(article_id=article.id, tag_id=tags[tag_name].id))
        db.session.commit()
