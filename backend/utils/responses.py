"""
JSON envelope helpers shared by every blueprint.

All API responses look like {"success": bool, <resource>: ..., "error": str}.
"""
import logging
from flask import jsonify, request
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

FOREIGN_KEY = 'foreign_key'
UNIQUE = 'unique'

# MySQL error numbers and PostgreSQL SQLSTATE codes
_FOREIGN_KEY_CODES = {1451, 1452, '23503'}
_UNIQUE_CODES = {1062, '23505'}


def success_response(status=200, **payload):
    body = {'success': True}
    body.update(payload)
    return jsonify(body), status


def error_response(message, status=400):
    return jsonify({
        'success': False,
        'error': message
    }), status


def validation_error(errors):
    return error_response(', '.join(errors), 400)


def get_json_body():
    """Request body as a dict; a missing or non-object body counts as empty"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def classify_integrity_error(error):
    """
    Tell foreign-key violations from unique violations.
    Returns FOREIGN_KEY, UNIQUE or None when the driver gives no hint.
    """
    if not isinstance(error, IntegrityError):
        return None

    orig = getattr(error, 'orig', None)
    code = getattr(orig, 'pgcode', None)
    if code is None and orig is not None and getattr(orig, 'args', None):
        code = orig.args[0]

    if code in _FOREIGN_KEY_CODES:
        return FOREIGN_KEY
    if code in _UNIQUE_CODES:
        return UNIQUE

    text = str(orig if orig is not None else error).lower()
    if 'foreign key' in text:
        return FOREIGN_KEY
    if 'unique' in text or 'duplicate' in text:
        return UNIQUE
    return None


def database_error(error, message, integrity_messages=None):
    """
    Convert a database exception into the JSON error body.

    integrity_messages maps FOREIGN_KEY / UNIQUE to the 400 message the
    caller wants for that kind of constraint failure. Anything else is
    a 500 with the driver message appended.
    """
    kind = classify_integrity_error(error)
    if kind and integrity_messages and kind in integrity_messages:
        logger.warning("[DB] %s constraint rejected request: %s", kind, error)
        return error_response(integrity_messages[kind], 400)

    logger.error("[DB] %s: %s", message, error)
    return error_response(f'{message}: {error}', 500)
