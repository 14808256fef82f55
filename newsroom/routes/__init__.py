"""Routes package - Blueprint registration."""
from newsroom.routes.main import main_bp
from newsroom.routes.auth import auth_bp
from newsroom.routes.articles import articles_bp
from newsroom.routes.comments import comments_bp
from newsroom.routes.user import user_bp
from newsroom.routes.admin import admin_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(articles_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(admin_bp)
