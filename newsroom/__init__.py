"""
Newsroom - Application Factory
"""
import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, current_app, request

from newsroom.errors import NewsroomError, register_error_handlers
from newsroom.extensions import babel, db, mongo, setup_oauth
from newsroom.repositories import ARTICLE_STORES
from newsroom.routes import register_blueprints
from config.settings import config


def get_locale():
    """Determine the best locale for the user."""
    languages = current_app.config['LANGUAGES']
    lang = request.cookies.get('babel_translation')
    if lang in languages:
        return lang
    return request.accept_languages.best_match(languages)


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('newsroom').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name=None):
    """Application Factory."""
    load_dotenv()

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))
    configure_logging(app)

    store = app.config['ARTICLE_STORE']
    if store not in ARTICLE_STORES:
        raise RuntimeError(f'Unknown ARTICLE_STORE {store!r}, expected one of {ARTICLE_STORES}')

    # Initialize extensions
    db.init_app(app)
    babel.init_app(app, locale_selector=get_locale)
    setup_oauth(app)
    if store == 'document':
        mongo.init_app(app)

    # Register blueprints
    register_blueprints(app)
    register_error_handlers(app)

    # CLI Commands
    register_cli_commands(app)

    app.logger.debug('Newsroom started (config=%s, store=%s)', config_name, store)
    return app


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        print("Initialized the database.")

    @app.cli.command("seed-db")
    def seed_db_command():
        """Inserts the admin user, categories, tags and sample articles."""
        from newsroom.services.seed import seed_database
        db.create_all()
        seed_database()
        print("Seeded the database.")

    @app.cli.command("set-role")
    @click.argument("user_id")
    @click.argument("role")
    def set_role_command(user_id, role):
        """Changes a user's role (user, admin, developer)."""
        from newsroom.services.users import set_user_role
        try:
            set_user_role(user_id, role)
        except NewsroomError as e:
            raise click.ClickException(e.message)
        print(f"User {user_id} is now {role}.")
