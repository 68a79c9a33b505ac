import logging
from functools import wraps

from flask import jsonify

from brewtrack.errors import ConflictError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)


def api_errors(f):
    """
    Decorator that turns brewtrack errors raised by a view into JSON responses.
    Storage failures never leak their message.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except NotFoundError as exc:
            return jsonify({"success": False, "message": exc.message}), 404
        except ConflictError as exc:
            return jsonify({"success": False, "message": exc.message}), 409
        except ValidationError as exc:
            return jsonify({"success": False, "message": exc.message, "errors": exc.to_dict()}), 400
        except StorageError:
            logger.error("storage failure in %s", f.__name__)
            return jsonify({"success": False, "message": "Internal server error."}), 500
    return decorated_function
