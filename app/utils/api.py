from functools import wraps

from flask import jsonify
from flask_login import current_user
from flask_wtf import FlaskForm


class ApiForm(FlaskForm):
    """Form fed from JSON or multipart bodies of bearer-authenticated calls."""

    class Meta:
        csrf = False


def error_response(message, status=400, **extra):
    payload = {'success': False, 'message': message}
    payload.update(extra)
    return jsonify(payload), status


def validation_error(form, message='Validation errors'):
    return error_response(message, 400, errors=form.errors)


def admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_admin:
            return error_response('Admin access required', 403)
        return f(*args, **kwargs)
    return decorated
