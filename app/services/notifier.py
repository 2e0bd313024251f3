"""Single entry point for "a chat message was persisted" side effects.

Two triggers reach ``MessageNotifier.notify_new_message``: the socket
``sendMessage`` handler and the response hook on ``POST /messages``. The
notifier claims the message id in a short-lived cache before pushing, so a
message seen by both triggers is pushed once.
"""
import logging
import threading
import time

from app import db
from app.models.car import Car
from app.models.notification import Notification
from app.models.user import User
from app.services.presence import presence

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
IMAGE_ONLY_BODY = 'Sent you a photo'


def preview(content, length=PREVIEW_LENGTH):
    content = content or ''
    if len(content) > length:
        return content[:length - 3] + '...'
    return content


class RecentKeys:
    """Thread-safe set whose members expire after ``ttl`` seconds."""

    def __init__(self, ttl=300, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._seen = {}
        self._lock = threading.Lock()

    def claim(self, key):
        """Record ``key``; False when it was already claimed and unexpired."""
        now = self._clock()
        with self._lock:
            expired = [k for k, at in self._seen.items() if now - at >= self.ttl]
            for k in expired:
                del self._seen[k]
            if key in self._seen:
                return False
            self._seen[key] = now
            return True


class MessageNotifier:
    def __init__(self, app=None):
        self.recent = RecentKeys()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.recent = RecentKeys(ttl=app.config.get('NOTIFY_DEDUP_TTL', 300))
        app.extensions['message_notifier'] = self

    def notify_new_message(self, sender_id, receiver_id, car_id, content=None,
                           message_id=None, has_images=False):
        """Push a new-message alert to an offline receiver.

        Returns the provider tickets, or None when nothing was sent because
        the message was already handled or the receiver is connected.
        """
        from app import push

        if message_id is not None and not self.recent.claim(f'message:{message_id}'):
            logger.info('Push for message %s already dispatched, skipping', message_id)
            return None

        if presence.is_online(receiver_id):
            logger.info('Receiver %s is connected, no push for message %s', receiver_id, message_id)
            return None

        receiver = db.session.get(User, _as_int(receiver_id))
        if receiver is None:
            logger.warning('Receiver %s not found, no push for message %s', receiver_id, message_id)
            return []

        tokens = receiver.push_token_values()
        if not tokens:
            logger.info('Receiver %s has no push tokens', receiver_id)
            return []

        sender = db.session.get(User, _as_int(sender_id))
        car = db.session.get(Car, _as_int(car_id))
        sender_name = sender.full_name if sender else 'Someone'
        title = f'{sender_name} • {car.display_name}' if car else f'New message from {sender_name}'
        body = preview(content) or (IMAGE_ONLY_BODY if has_images else 'New message')

        data = {
            'type': 'newMessage',
            'message_id': message_id,
            'sender_id': sender_id,
            'car_id': car_id,
            'navigation': {
                'screen': 'ChatScreen',
                'params': {
                    'recipientId': sender_id,
                    'carId': car_id,
                    'chatName': sender_name,
                },
            },
        }
        return push.send(tokens, title, body, data)


def record_message_notifications(car, message_id, sender_id, receiver_id, content):
    """Create the inbox entries for a message: one for the receiver and one
    for the sender unless the sender owns the car.

    Repeated calls for the same message return the existing entries.
    """
    existing = Notification.query.filter_by(related_id=str(message_id)).all()
    if existing:
        return existing

    receiver_id = _as_int(receiver_id)
    sender_id = _as_int(sender_id)
    receiver_is_owner = car.owner_id == receiver_id
    sender_is_owner = car.owner_id == sender_id
    body = preview(content)

    notifications = [Notification(
        user_id=receiver_id,
        title=f'New message about {car.display_name}',
        message=body,
        type='my_car_inquiries' if receiver_is_owner else 'my_inquiries',
        is_read=False,
        related_id=str(message_id),
        sender_id=sender_id,
        car_id=car.id
    )]
    if not sender_is_owner:
        notifications.append(Notification(
            user_id=sender_id,
            title=f'Your inquiry about {car.display_name}',
            message=body,
            type='my_inquiries',
            is_read=True,
            related_id=str(message_id),
            sender_id=receiver_id,
            car_id=car.id
        ))

    db.session.add_all(notifications)
    db.session.commit()
    logger.info('Created %d notification(s) for message %s', len(notifications), message_id)
    return notifications


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def _resolve_id(value):
    # Populated objects carry their id; raw ids pass through
    if isinstance(value, dict):
        return value.get('id', value.get('_id'))
    return value


def message_fields(payload):
    """Pull notifier arguments out of a serialized message.

    Accepts raw ids (``sender_id``) or populated objects (``sender``).
    Returns None when the payload does not look like a created message.
    """
    if not isinstance(payload, dict):
        return None

    sender_id = _resolve_id(payload.get('sender')) or _resolve_id(payload.get('sender_id'))
    receiver_id = _resolve_id(payload.get('receiver')) or _resolve_id(payload.get('receiver_id'))
    car_id = _resolve_id(payload.get('car')) or _resolve_id(payload.get('car_id'))
    if not (sender_id and receiver_id and car_id):
        return None

    return {
        'message_id': payload.get('id', payload.get('_id')),
        'sender_id': sender_id,
        'receiver_id': receiver_id,
        'car_id': car_id,
        'content': payload.get('content'),
        'has_images': bool(payload.get('images')),
    }
