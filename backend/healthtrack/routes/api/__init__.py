"""
Client API routes.
"""
import asyncio
import logging
from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from healthtrack.errors import (
    HealthTrackError, RequestDeadlineExceeded, StorageError, ValidationError,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


def json_body():
    """Parsed JSON object body, or None when missing, unparsable or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


async def within_request_deadline(awaitable):
    """Bound the whole request; the reading write may already have happened."""
    timeout = current_app.config['REQUEST_TIMEOUT_SECONDS']
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise RequestDeadlineExceeded('Request timeout exceeded. Please try again.') from None


@api_bp.errorhandler(ValidationError)
def handle_validation_error(error):
    return jsonify({'message': 'Validation error', 'errors': error.errors}), 400


@api_bp.errorhandler(StorageError)
def handle_storage_error(error):
    logger.error('Storage failure: %s', error, exc_info=error.__cause__)
    return jsonify({'message': 'A database error occurred. Please try again.'}), 500


@api_bp.errorhandler(HealthTrackError)
def handle_app_error(error):
    return jsonify({'message': str(error) or 'An unexpected error occurred'}), error.status_code


@api_bp.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.exception('Unhandled error in %s', request.endpoint)
    return jsonify({'message': 'An unexpected error occurred'}), 500


# Import submodules to register routes on api_bp
from . import readings   # noqa: E402, F401
from . import ai         # noqa: E402, F401
from . import profile    # noqa: E402, F401
from . import devices    # noqa: E402, F401
