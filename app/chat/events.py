import logging
import time
from datetime import datetime
from flask import request
from flask_socketio import emit, join_room, leave_room, rooms
from app import socketio, db, notifier
from app.models.message import Message
from app.services.notifier import message_fields
from app.services.presence import presence
from app.utils.background import spawn
from app.utils.rooms import chat_room_id

logger = logging.getLogger(__name__)


def _room_from(data):
    if not isinstance(data, dict):
        return None
    sender_id = data.get('sender_id')
    receiver_id = data.get('receiver_id')
    car_id = data.get('car_id')
    if not (sender_id and receiver_id and car_id):
        return None
    return chat_room_id(sender_id, receiver_id, car_id)


@socketio.on('addUser')
def on_add_user(user_id):
    if not user_id:
        return
    presence.add(user_id, request.sid)
    emit('getUsers', presence.snapshot(), broadcast=True)


@socketio.on('joinRoom')
def on_join_room(data):
    room = _room_from(data)
    if room is None:
        return
    join_room(room)
    emit('roomJoined', {'room_id': room})


@socketio.on('leaveRoom')
def on_leave_room(data):
    room = _room_from(data)
    if room is None:
        return
    leave_room(room)


@socketio.on('sendMessage')
def on_send_message(data):
    fields = message_fields(data)
    if fields is None:
        logger.warning('sendMessage without sender/receiver/car ids from %s', request.sid)
        return

    room = chat_room_id(fields['sender_id'], fields['receiver_id'], fields['car_id'])
    emit('getMessage', data, to=room, include_self=False)

    # Push fallback for a receiver who is not connected
    spawn(notifier.notify_new_message, **fields)


@socketio.on('confirmDelivery')
def on_confirm_delivery(data):
    room = _room_from(data)
    if room is None:
        return

    message_id = data.get('message_id')
    message = db.session.get(Message, message_id) if message_id else None
    if message is not None:
        message.mark_delivered()
        db.session.commit()

    receipt = {
        'message_id': message_id,
        'sender_id': data.get('sender_id'),
        'receiver_id': data.get('receiver_id'),
        'delivered_at': (message.delivered_at if message else datetime.utcnow()).isoformat()
    }
    sender_sid = presence.lookup(data.get('sender_id'))
    if sender_sid:
        emit('messageDelivered', receipt, to=sender_sid)

    emit('refreshMessages', {
        'action': 'messageDelivered',
        'message_id': message_id,
        'timestamp': int(time.time() * 1000)
    }, to=room)


@socketio.on('disconnect')
def on_disconnect(reason=None):
    user_id = presence.remove(request.sid)
    for room in rooms():
        if room != request.sid:
            leave_room(room)
    if user_id is not None:
        socketio.emit('getUsers', presence.snapshot())
