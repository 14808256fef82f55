"""Repositories package - the article store selected by ARTICLE_STORE."""
from flask import current_app

from newsroom.repositories.base import ArticleRepository
from newsroom.repositories.document import DocumentArticleRepository
from newsroom.repositories.sql import SqlArticleRepository

ARTICLE_STORES = ('sql', 'document')


def get_repository():
    """The one article repository configured for the current app."""
    store = current_app.config['ARTICLE_STORE']
    if store == 'document':
        return DocumentArticleRepository(current_app.extensions['mongo'].db)
    return SqlArticleRepository()


__all__ = ['ArticleRepository', 'DocumentArticleRepository', 'SqlArticleRepository',
           'ARTICLE_STORES', 'get_repository']
