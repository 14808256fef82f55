"""Domain errors and the JSON error handlers that render them."""
import logging

from flask import jsonify
from flask_babel import gettext as _
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from newsroom.extensions import db

logger = logging.getLogger(__name__)


class NewsroomError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message)
        self.message = message


class BadRequestError(NewsroomError):
    status_code = 400


class ForbiddenError(NewsroomError):
    status_code = 403


class NotFoundError(NewsroomError):
    status_code = 404


class ConflictError(NewsroomError):
    status_code = 409


def register_error_handlers(app):
    """Map every failure leaving a view to a JSON body."""

    @app.errorhandler(NewsroomError)
    def handle_domain_error(error):
        # Domain messages are plain English; translated here when a catalog has them
        return jsonify(message=_(error.message or 'Request failed')), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        errors = [
            {'loc': [str(part) for part in e['loc']], 'msg': e['msg']}
            for e in error.errors()
        ]
        return jsonify(message=_('Invalid request body'), errors=errors), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify(message=error.description), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('Unhandled error: %s', error)
        db.session.rollback()
        return jsonify(message=_('Internal server error')), 500
