import logging
import time
from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError
from app import db, socketio
from app.chat import bp
from app.chat.forms import SendMessageForm, EditMessageForm
from app.models.car import Car
from app.models.message import Message
from app.models.user import User
from app.services.notifier import record_message_notifications
from app.utils.api import error_response, validation_error
from app.utils.media import upload_images
from app.utils.rooms import chat_room_id

logger = logging.getLogger(__name__)


def room_for(message):
    return chat_room_id(message.sender_id, message.receiver_id, message.car_id)


def refresh_room(room, action, message_id):
    socketio.emit('refreshMessages', {
        'action': action,
        'message_id': message_id,
        'timestamp': int(time.time() * 1000)
    }, to=room)


@bp.route('/messages', methods=['POST'])
@login_required
def send_message():
    form = SendMessageForm()
    if not form.validate():
        return validation_error(form, 'receiver_id and car_id are required')

    car = db.session.get(Car, form.car_id.data)
    if car is None:
        return error_response('Car not found', 404)
    if db.session.get(User, form.receiver_id.data) is None:
        return error_response('Receiver not found', 404)

    files = [f for f in request.files.getlist('images') if f and f.filename]
    if len(files) > current_app.config['MESSAGE_MAX_IMAGES']:
        return error_response(
            f"A message can carry at most {current_app.config['MESSAGE_MAX_IMAGES']} images", 400)

    images = []
    if files:
        images = upload_images(files, folder='messages')
        if not images:
            return error_response('Failed to upload any images. Please try again.', 500)

    content = form.content.data or ''
    if not content.strip() and not images:
        return error_response('Message must have either text content or images', 400)

    message = Message(
        sender_id=current_user.id,
        receiver_id=form.receiver_id.data,
        car_id=car.id,
        content=content,
        images=images,
        is_delivered=False,
        is_read=False
    )
    db.session.add(message)
    db.session.commit()
    logger.info('Message %s stored (%s -> %s, car %s)',
                message.id, message.sender_id, message.receiver_id, message.car_id)

    # Inbox entries are a side effect; the message itself is already stored
    try:
        record_message_notifications(car, message.id, message.sender_id,
                                     message.receiver_id, message.content)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error('Could not create notifications for message %s: %s', message.id, exc)

    refresh_room(room_for(message), 'newMessage', message.id)

    return jsonify({'success': True, 'message': message.to_dict()}), 201


@bp.route('/messages/<int:user_id>', methods=['GET'])
@login_required
def get_messages(user_id):
    messages = Message.between(current_user.id, user_id) \
        .order_by(Message.created_at.asc(), Message.id.asc()).all()
    return jsonify({'success': True, 'messages': [m.to_dict() for m in messages]})


@bp.route('/messages/<int:receiver_id>/<int:car_id>', methods=['GET'])
@login_required
def get_car_user_messages(receiver_id, car_id):
    messages = Message.between(current_user.id, receiver_id) \
        .filter(Message.car_id == car_id) \
        .order_by(Message.created_at.asc(), Message.id.asc()).all()
    return jsonify({'success': True, 'messages': [m.to_dict() for m in messages]})


@bp.route('/messages/<int:message_id>', methods=['PUT'])
@login_required
def update_message(message_id):
    message = db.session.get(Message, message_id)
    if message is None or message.is_deleted:
        return error_response('Message not found', 404)

    if message.sender_id != current_user.id:
        return error_response('You can only edit your own messages', 403)

    window = current_app.config['MESSAGE_EDIT_WINDOW_MINUTES']
    if not message.is_editable(window):
        return error_response(f'Message can no longer be edited ({window} minute limit exceeded)', 403)

    form = EditMessageForm()
    if not form.validate():
        return validation_error(form, 'Content field is required')

    message.content = form.content.data
    message.is_edited = True
    db.session.commit()

    data = message.to_dict()
    room = room_for(message)
    socketio.emit('messageUpdated', data, to=room)
    refresh_room(room, 'messageUpdated', message.id)

    return jsonify({'success': True, 'message': data})


@bp.route('/messages/<int:message_id>', methods=['DELETE'])
@login_required
def delete_message(message_id):
    message = db.session.get(Message, message_id)
    if message is None:
        return error_response('Message not found', 404)

    if message.sender_id != current_user.id:
        return error_response('You can only delete your own messages', 403)

    message.is_deleted = True
    db.session.commit()

    room = room_for(message)
    socketio.emit('messageDeleted', {'message_id': message.id}, to=room)
    refresh_room(room, 'messageDeleted', message.id)

    return jsonify({'success': True, 'message': 'Message marked as deleted'})


@bp.route('/messages/<int:message_id>/read', methods=['PUT'])
@login_required
def mark_message_read(message_id):
    message = db.session.get(Message, message_id)
    if message is None:
        return error_response('Message not found', 404)

    if message.receiver_id != current_user.id:
        return error_response('Unauthorized to mark this message as read', 403)

    message.mark_read()
    db.session.commit()

    room = room_for(message)
    socketio.emit('messageRead', {
        'message_id': message.id,
        'sender_id': message.sender_id,
        'receiver_id': message.receiver_id,
        'car_id': message.car_id,
        'read_at': message.read_at.isoformat(),
        'message': message.to_dict(),
        'reader': current_user.to_summary()
    }, to=room)
    refresh_room(room, 'messageRead', message.id)

    return jsonify({'success': True, 'message': 'Message marked as read'})


@bp.route('/messages/<int:message_id>/delivered', methods=['PUT'])
@login_required
def mark_message_delivered(message_id):
    message = db.session.get(Message, message_id)
    if message is None:
        return error_response('Message not found', 404)

    message.mark_delivered()
    db.session.commit()

    room = room_for(message)
    socketio.emit('messageDelivered', {
        'message_id': message.id,
        'sender_id': message.sender_id,
        'receiver_id': message.receiver_id
    }, to=room)
    refresh_room(room, 'messageDelivered', message.id)

    return jsonify({'success': True, 'message': 'Message marked as delivered'})


@bp.route('/messages/read/<int:sender_id>/<int:car_id>', methods=['PUT'])
@login_required
def mark_messages_read(sender_id, car_id):
    unread = Message.query.filter_by(
        car_id=car_id,
        sender_id=sender_id,
        receiver_id=current_user.id,
        is_read=False
    ).all()

    for message in unread:
        message.mark_read()
    db.session.commit()

    return jsonify({
        'success': True,
        'message': 'Messages marked as read',
        'updated_count': len(unread)
    })


@bp.route('/car-inquiries/<int:car_id>', methods=['GET'])
@login_required
def get_car_inquiries(car_id):
    car = db.session.get(Car, car_id)
    if car is None:
        return error_response('Car not found', 404)
    if car.owner_id != current_user.id:
        return error_response('Only the owner can view inquiries for this car', 403)

    messages = Message.visible().filter_by(car_id=car_id) \
        .order_by(Message.created_at.desc()).all()

    # Group by inquirer; the first message seen per sender is the latest one
    conversations = {}
    for message in messages:
        if message.sender is None:
            continue
        conversation = conversations.setdefault(message.sender_id, {
            'sender': message.sender.to_summary(),
            'last_message': {
                'content': message.to_dict()['content'],
                'created_at': message.created_at.isoformat(),
                'images': message.images or [],
            },
            'messages': [],
            'unread_count': 0,
        })
        conversation['messages'].append(message)
        if not message.is_read and message.sender_id != current_user.id:
            conversation['unread_count'] += 1

    inquiries = []
    for conversation in conversations.values():
        ordered = sorted(conversation['messages'], key=lambda m: m.created_at)
        conversation['messages'] = [m.to_dict() for m in ordered]
        inquiries.append(conversation)
    inquiries.sort(key=lambda c: c['last_message']['created_at'], reverse=True)

    return jsonify({'success': True, 'inquiries': inquiries})
