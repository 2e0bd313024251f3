import logging
from flask import jsonify, request
from flask_login import current_user, login_required
from app import db
from app.notifications import bp
from app.notifications.forms import MessageNotificationForm
from app.models.car import Car
from app.models.message import Message
from app.models.notification import Notification, NOTIFICATION_TYPES
from app.services.notifier import record_message_notifications
from app.utils.api import error_response, validation_error

logger = logging.getLogger(__name__)

PAGE_SIZE = 30


def _type_filter():
    type_filter = request.args.get('filter', 'all')
    if type_filter not in NOTIFICATION_TYPES:
        return None
    return type_filter


@bp.route('/notifications', methods=['GET'])
@login_required
def get_notifications():
    type_filter = _type_filter()
    if type_filter is None:
        return error_response('Unknown notification filter', 400)

    notifications = Notification.for_user(current_user.id, type_filter) \
        .order_by(Notification.created_at.desc(), Notification.id.desc()) \
        .limit(PAGE_SIZE).all()
    unread_count = Notification.query.filter_by(user_id=current_user.id, is_read=False).count()

    return jsonify({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': unread_count
    })


@bp.route('/notifications/count', methods=['GET'])
@login_required
def get_notification_count():
    type_filter = _type_filter()
    if type_filter is None:
        return error_response('Unknown notification filter', 400)

    count = Notification.for_user(current_user.id, type_filter).filter_by(is_read=False).count()
    return jsonify({'success': True, 'count': count})


@bp.route('/notifications/<int:notification_id>/read', methods=['PUT'])
@login_required
def mark_as_read(notification_id):
    notification = Notification.query.filter_by(id=notification_id, user_id=current_user.id).first()
    if notification is None:
        return error_response('Notification not found', 404)

    notification.is_read = True
    db.session.commit()
    return jsonify({'success': True, 'notification': notification.to_dict()})


@bp.route('/notifications/mark-all-read', methods=['PUT'])
@login_required
def mark_all_as_read():
    type_filter = _type_filter()
    if type_filter is None:
        return error_response('Unknown notification filter', 400)

    updated = Notification.for_user(current_user.id, type_filter) \
        .filter_by(is_read=False) \
        .update({Notification.is_read: True}, synchronize_session=False)
    db.session.commit()

    return jsonify({
        'success': True,
        'message': 'All notifications marked as read',
        'updated_count': updated
    })


@bp.route('/notifications/message', methods=['POST'])
@login_required
def create_from_message():
    form = MessageNotificationForm()
    if not form.validate():
        return validation_error(form, 'Missing required parameters')

    # Participants and car come from the stored message, never from the body
    message = db.session.get(Message, form.message_id.data)
    if message is None:
        return error_response('Message not found', 404)
    if current_user.id not in (message.sender_id, message.receiver_id):
        return error_response('You are not part of this conversation', 403)

    car = db.session.get(Car, message.car_id)
    if car is None:
        return error_response('Car not found', 404)

    notifications = record_message_notifications(
        car,
        message.id,
        message.sender_id,
        message.receiver_id,
        message.content
    )

    return jsonify({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'count': len(notifications)
    }), 201


@bp.route('/notifications/<int:notification_id>', methods=['DELETE'])
@login_required
def delete_notification(notification_id):
    notification = Notification.query.filter_by(id=notification_id, user_id=current_user.id).first()
    if notification is None:
        return error_response('Notification not found', 404)

    db.session.delete(notification)
    db.session.commit()
    return jsonify({'success': True, 'message': 'Notification deleted'})
