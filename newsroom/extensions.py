"""Flask extension instances, bound to the app in create_app()."""
from authlib.integrations.flask_client import OAuth
from flask_babel import Babel
from flask_sqlalchemy import SQLAlchemy
from pymongo import MongoClient

db = SQLAlchemy()
babel = Babel()
oauth = OAuth()


class Mongo:
    """Holds the document store database for the app."""

    def __init__(self):
        self.client = None
        self.db = None

    def init_app(self, app, client=None):
        if client is None:
            client = MongoClient(app.config['MONGO_URI'], connect=False)
        self.client = client
        self.db = client[app.config['MONGO_DB_NAME']]
        app.extensions['mongo'] = self


mongo = Mongo()


def setup_oauth(app):
    oauth.init_app(app)
    oauth.register(
        name='oidc',
        client_id=app.config.get('OIDC_CLIENT_ID'),
        client_secret=app.config.get('OIDC_CLIENT_SECRET'),
        server_metadata_url=app.config.get('OIDC_METADATA_URL'),
        client_kwargs={'scope': 'openid email profile'},
    )
