from app import notifier
from app.services.notifier import RecentKeys, message_fields, preview
from app.services.presence import presence


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_recent_keys_expire():
    clock = FakeClock()
    keys = RecentKeys(ttl=60, clock=clock)

    assert keys.claim('message:1')
    assert not keys.claim('message:1')
    clock.now += 61
    assert keys.claim('message:1')


def test_preview_truncates():
    assert preview('short') == 'short'
    assert preview(None) == ''
    long_text = 'x' * 150
    assert preview(long_text) == 'x' * 97 + '...'
    assert len(preview(long_text)) == 100


def test_message_fields_from_raw_ids():
    fields = message_fields({'id': 5, 'sender_id': 1, 'receiver_id': 2, 'car_id': 3, 'content': 'hi'})
    assert fields == {
        'message_id': 5,
        'sender_id': 1,
        'receiver_id': 2,
        'car_id': 3,
        'content': 'hi',
        'has_images': False,
    }


def test_message_fields_from_populated_objects():
    fields = message_fields({
        '_id': 'abc',
        'sender': {'_id': 'u1', 'first_name': 'A'},
        'receiver': {'id': 'u2'},
        'car': {'_id': 'c3'},
        'images': [{'url': 'https://example.com/a.jpg'}],
    })
    assert fields['message_id'] == 'abc'
    assert (fields['sender_id'], fields['receiver_id'], fields['car_id']) == ('u1', 'u2', 'c3')
    assert fields['has_images'] is True


def test_message_fields_rejects_incomplete_payload():
    assert message_fields({'sender_id': 1, 'car_id': 3}) is None
    assert message_fields(None) is None
    assert message_fields('hello') is None


def test_offline_receiver_gets_push(renter, owner, car, push_client):
    tickets = notifier.notify_new_message(renter.id, owner.id, car.id, 'Is it available?', message_id=1)

    assert len(tickets) == 1
    message = push_client.messages[0]
    assert message.to == 'ExponentPushToken[owner-device]'
    assert message.title == 'Rafael Renter • Toyota Vios'
    assert message.body == 'Is it available?'
    assert message.data['type'] == 'newMessage'
    assert message.data['message_id'] == 1
    assert message.data['navigation'] == {
        'screen': 'ChatScreen',
        'params': {'recipientId': renter.id, 'carId': car.id, 'chatName': 'Rafael Renter'},
    }


def test_same_message_is_pushed_once(renter, owner, car, push_client):
    first = notifier.notify_new_message(renter.id, owner.id, car.id, 'hello', message_id=9)
    second = notifier.notify_new_message(renter.id, owner.id, car.id, 'hello', message_id=9)

    assert len(first) == 1
    assert second is None
    assert len(push_client.messages) == 1


def test_messages_without_id_are_not_deduplicated(renter, owner, car, push_client):
    notifier.notify_new_message(renter.id, owner.id, car.id, 'one')
    notifier.notify_new_message(renter.id, owner.id, car.id, 'two')
    assert [m.body for m in push_client.messages] == ['one', 'two']


def test_online_receiver_is_not_pushed(renter, owner, car, push_client):
    presence.add(owner.id, 'owner-sid')

    assert notifier.notify_new_message(renter.id, owner.id, car.id, 'hi', message_id=2) is None
    assert push_client.published == []


def test_receiver_without_tokens(user_factory, renter, car, push_client):
    silent = user_factory('silent@example.com')
    assert notifier.notify_new_message(renter.id, silent.id, car.id, 'hi', message_id=3) == []
    assert push_client.published == []


def test_image_only_message_body(renter, owner, car, push_client):
    notifier.notify_new_message(renter.id, owner.id, car.id, '', message_id=4, has_images=True)
    assert push_client.messages[0].body == 'Sent you a photo'
