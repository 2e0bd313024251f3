from collections import namedtuple

import pytest
import requests
from flask import g

from app import create_app, db, push, socketio
from app.models.car import Car
from app.models.user import User
from app.services.presence import presence
from config import Config

FakeTicket = namedtuple('FakeTicket', ['push_message', 'status', 'message', 'details', 'id'])
FakeReceipt = namedtuple('FakeReceipt', ['id', 'status', 'message', 'details'])


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    MAIL_SUPPRESS_SEND = True
    NOTIFY_INLINE = True
    SOCKETIO_ASYNC_MODE = 'threading'
    EXPO_ACCESS_TOKEN = None


class FakePushClient:
    """Stands in for the Expo PushClient: records chunks and receipt checks."""

    def __init__(self):
        self.published = []
        self.receipt_checks = []
        self.failing_chunks = set()
        self.error_tokens = set()

    def publish_multiple(self, messages):
        index = len(self.published)
        self.published.append(list(messages))
        if index in self.failing_chunks:
            raise requests.exceptions.ConnectionError('provider unreachable')

        tickets = []
        for i, message in enumerate(messages):
            if message.to in self.error_tokens:
                tickets.append(FakeTicket(message, 'error', 'not registered',
                                          {'error': 'DeviceNotRegistered'}, None))
            else:
                tickets.append(FakeTicket(message, 'ok', None, None, f'ticket-{index}-{i}'))
        return tickets

    def check_receipts_multiple(self, tickets):
        self.receipt_checks.append(list(tickets))
        return [FakeReceipt(t.id, 'ok', None, None) for t in tickets]

    @property
    def messages(self):
        return [m for chunk in self.published for m in chunk]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    presence.clear()

    # Requests reuse the fixture's app context, so drop the cached login user
    @app.before_request
    def reset_login_cache():
        g.pop('_login_user', None)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    presence.clear()


@pytest.fixture
def push_client(app):
    fake = FakePushClient()
    push.client = fake
    return fake


@pytest.fixture
def client(app, push_client):
    return app.test_client()


@pytest.fixture
def socket_client_factory(app, client):
    created = []

    def make():
        socket_client = socketio.test_client(app, flask_test_client=client)
        created.append(socket_client)
        return socket_client

    yield make
    for socket_client in created:
        if socket_client.is_connected():
            socket_client.disconnect()


def make_user(email, first_name='Test', last_name='User', role='user', tokens=()):
    user = User(email=email, first_name=first_name, last_name=last_name, role=role)
    user.set_password('password123')
    db.session.add(user)
    db.session.flush()
    for token in tokens:
        user.add_push_token(token)
    db.session.commit()
    return user


def make_car(owner, brand='Toyota', model='Vios', **kwargs):
    kwargs.setdefault('price_per_day', 1500)
    car = Car(owner_id=owner.id, brand=brand, model=model, **kwargs)
    db.session.add(car)
    db.session.commit()
    return car


def auth_headers(user):
    return {'Authorization': f'Bearer {user.get_api_token()}'}


@pytest.fixture
def owner(app):
    return make_user('owner@example.com', 'Olivia', 'Owner',
                     tokens=['ExponentPushToken[owner-device]'])


@pytest.fixture
def renter(app):
    return make_user('renter@example.com', 'Rafael', 'Renter',
                     tokens=['ExponentPushToken[renter-device]'])


@pytest.fixture
def car(owner):
    return make_car(owner)


@pytest.fixture
def user_factory(app):
    return make_user


@pytest.fixture
def car_factory(app):
    return make_car


@pytest.fixture
def auth():
    return auth_headers


@pytest.fixture
def app_factory():
    def build():
        return create_app(TestConfig)
    return build
