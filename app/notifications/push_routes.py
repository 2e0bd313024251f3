import logging
from flask import jsonify, request
from flask_login import current_user, login_required
from app import db, push
from app.notifications import push_bp
from app.notifications.forms import RegisterTokenForm
from app.services.push import is_push_token, ticket_to_dict
from app.utils.api import error_response, validation_error, admin_required

logger = logging.getLogger(__name__)


@push_bp.route('/register-token', methods=['POST'])
@login_required
def register_token():
    form = RegisterTokenForm()
    if not form.validate():
        return validation_error(form, 'Token is required')

    token = form.token.data.strip()
    if not is_push_token(token):
        return error_response('Invalid Expo push token format', 400)

    if current_user.add_push_token(token):
        db.session.commit()
        logger.info('Push token registered for user %s', current_user.id)

    return jsonify({'success': True, 'message': 'Push token registered successfully'})


@push_bp.route('/send-notification', methods=['POST'])
@login_required
@admin_required
def send_notification():
    payload = request.get_json(silent=True) or {}
    tokens = payload.get('tokens')
    if not isinstance(tokens, list) or not tokens:
        return error_response('Push tokens are required and must be an array', 400)

    data = payload.get('data') or {}
    if not isinstance(data, dict):
        return error_response('data must be an object', 400)

    tickets = push.send(
        tokens,
        payload.get('title') or 'New Notification',
        payload.get('body') or 'You have a new notification',
        data
    )
    if not tickets:
        return error_response('Failed to send notifications', 400)

    return jsonify({'success': True, 'tickets': [ticket_to_dict(t) for t in tickets]})
