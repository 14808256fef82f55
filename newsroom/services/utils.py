"""Helpers shared by the data-access services."""
from slugify import slugify as transliterate_slug
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from newsroom.extensions import db

PAGE_SIZE = 10
MAX_PAGE = 10000

# Symbols that tell tags apart ("C++" vs "C#") and would otherwise be stripped
SLUG_REPLACEMENTS = [['+', ' plus '], ['#', ' sharp ']]


def slugify(text, fallback='article'):
    """Lowercase ASCII slug; non-Latin scripts are transliterated."""
    return transliterate_slug(text or '', replacements=SLUG_REPLACEMENTS) or fallback


def page_offset(page):
    """Offset of a 1-based page; below 1 reads as the first page, above MAX_PAGE as the last."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    return (min(max(page, 1), MAX_PAGE) - 1) * PAGE_SIZE


def insert_ignore(model, **values):
    """
    INSERT ... ON CONFLICT DO NOTHING against the model's unique constraints.

    Returns True when a new row was written, False when it already existed.
    """
    table = model.__table__
    dialect = db.engine.dialect.name
    if dialect == 'postgresql':
        stmt = pg_insert(table).values(**values).on_conflict_do_nothing()
    elif dialect == 'sqlite':
        stmt = sqlite_insert(table).values(**values).on_conflict_do_nothing()
    else:
        raise RuntimeError(f'Unsupported database dialect: {dialect}')
    result = db.session.execute(stmt)
    return result.rowcount == 1
