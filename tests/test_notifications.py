from app import db
from app.models.message import Message
from app.models.notification import Notification
from app.models.user import PushToken


def store_message(sender, receiver, car, content='hi'):
    message = Message(sender_id=sender.id, receiver_id=receiver.id, car_id=car.id, content=content)
    db.session.add(message)
    db.session.commit()
    return message


def message_notification(client, auth, caller, sender, receiver, car, content='hi'):
    message = store_message(sender, receiver, car, content)
    return client.post('/api/v1/notifications/message', headers=auth(caller),
                       json={'message_id': message.id})


def test_create_from_message(client, auth, renter, owner, car):
    response = message_notification(client, auth, renter, renter, owner, car)

    assert response.status_code == 201
    assert response.get_json()['count'] == 2
    types = {n.user_id: n.type for n in Notification.query.all()}
    assert types == {owner.id: 'my_car_inquiries', renter.id: 'my_inquiries'}


def test_create_from_message_is_idempotent(client, auth, renter, owner, car):
    message = store_message(renter, owner, car)
    for _ in range(2):
        response = client.post('/api/v1/notifications/message', headers=auth(renter),
                               json={'message_id': message.id})

    assert response.get_json()['count'] == 2
    assert Notification.query.count() == 2


def test_create_from_message_validates(client, auth, renter):
    response = client.post('/api/v1/notifications/message', headers=auth(renter), json={})
    assert response.status_code == 400

    response = client.post('/api/v1/notifications/message', headers=auth(renter), json={'message_id': 999})
    assert response.status_code == 404
    assert Notification.query.count() == 0


def test_future_message_id_cannot_be_claimed(client, auth, renter, owner, car, user_factory):
    mallory = user_factory('mallory@example.com')
    forged = client.post('/api/v1/notifications/message', headers=auth(mallory), json={
        'message_id': 1, 'sender_id': mallory.id, 'receiver_id': mallory.id, 'car_id': car.id,
    })
    assert forged.status_code == 404

    response = client.post('/api/v1/messages', headers=auth(renter),
                           json={'receiver_id': owner.id, 'car_id': car.id, 'content': 'real one'})
    assert response.get_json()['message']['id'] == 1
    assert Notification.query.filter_by(user_id=owner.id).count() == 1


def test_only_participants_create_notifications(client, auth, renter, owner, car, user_factory):
    outsider = user_factory('outsider@example.com')
    message = store_message(renter, owner, car)

    response = client.post('/api/v1/notifications/message', headers=auth(outsider),
                           json={'message_id': message.id})
    assert response.status_code == 403
    assert Notification.query.count() == 0


def test_body_ids_are_ignored(client, auth, renter, owner, car, user_factory):
    outsider = user_factory('outsider@example.com')
    message = store_message(renter, owner, car)

    client.post('/api/v1/notifications/message', headers=auth(renter), json={
        'message_id': message.id, 'receiver_id': outsider.id, 'sender_id': outsider.id,
    })

    assert {n.user_id for n in Notification.query.all()} == {renter.id, owner.id}


def test_long_content_is_previewed(client, auth, renter, owner, car):
    message_notification(client, auth, renter, renter, owner, car, content='y' * 250)
    notification = Notification.query.filter_by(user_id=owner.id).one()
    assert len(notification.message) == 100
    assert notification.message.endswith('...')


def test_list_and_filter(client, auth, renter, owner, car, car_factory, user_factory):
    other_owner = user_factory('host@example.com', 'Hana', 'Host')
    other_car = car_factory(other_owner, brand='Ford', model='Ranger')
    message_notification(client, auth, renter, renter, owner, car)
    message_notification(client, auth, owner, other_owner, owner, other_car)

    everything = client.get('/api/v1/notifications', headers=auth(owner)).get_json()
    assert len(everything['notifications']) == 2
    assert everything['unread_count'] == 2

    inquiries = client.get('/api/v1/notifications?filter=my_car_inquiries', headers=auth(owner)).get_json()
    assert [n['type'] for n in inquiries['notifications']] == ['my_car_inquiries']

    count = client.get('/api/v1/notifications/count?filter=my_inquiries', headers=auth(owner)).get_json()
    assert count['count'] == 1


def test_unknown_filter(client, auth, owner):
    response = client.get('/api/v1/notifications?filter=bogus', headers=auth(owner))
    assert response.status_code == 400


def test_mark_one_read(client, auth, renter, owner, car):
    message_notification(client, auth, renter, renter, owner, car)
    notification = Notification.query.filter_by(user_id=owner.id).one()

    assert client.put(f'/api/v1/notifications/{notification.id}/read', headers=auth(renter)).status_code == 404

    response = client.put(f'/api/v1/notifications/{notification.id}/read', headers=auth(owner))
    assert response.status_code == 200
    assert response.get_json()['notification']['is_read'] is True


def test_mark_all_read_respects_filter(client, auth, renter, owner, car, car_factory, user_factory):
    other_owner = user_factory('host@example.com', 'Hana', 'Host')
    other_car = car_factory(other_owner, brand='Ford', model='Ranger')
    message_notification(client, auth, renter, renter, owner, car)
    message_notification(client, auth, owner, other_owner, owner, other_car)

    response = client.put('/api/v1/notifications/mark-all-read?filter=my_car_inquiries', headers=auth(owner))
    assert response.get_json()['updated_count'] == 1

    db.session.expire_all()
    unread = Notification.query.filter_by(user_id=owner.id, is_read=False).all()
    assert [n.type for n in unread] == ['my_inquiries']

    response = client.put('/api/v1/notifications/mark-all-read', headers=auth(owner))
    assert response.get_json()['updated_count'] == 1


def test_delete_own_notification(client, auth, renter, owner, car):
    message_notification(client, auth, renter, renter, owner, car)
    notification_id = Notification.query.filter_by(user_id=owner.id).one().id

    assert client.delete(f'/api/v1/notifications/{notification_id}', headers=auth(renter)).status_code == 404
    assert client.delete(f'/api/v1/notifications/{notification_id}', headers=auth(owner)).status_code == 200
    assert db.session.get(Notification, notification_id) is None


def test_register_token(client, auth, user_factory):
    user = user_factory('device@example.com')
    token = 'ExponentPushToken[new-device]'

    for _ in range(2):
        response = client.post('/register-token', headers=auth(user), json={'token': token})
        assert response.status_code == 200

    assert PushToken.query.filter_by(user_id=user.id).count() == 1
    assert user.push_token_values() == [token]


def test_register_token_rejects_bad_format(client, auth, renter):
    response = client.post('/register-token', headers=auth(renter), json={'token': 'nope'})
    assert response.status_code == 400

    response = client.post('/register-token', headers=auth(renter), json={})
    assert response.status_code == 400


def test_register_token_requires_login(client):
    response = client.post('/register-token', json={'token': 'ExponentPushToken[x]'})
    assert response.status_code == 401


def test_send_notification_admin_only(client, auth, renter, user_factory, push_client):
    payload = {'tokens': ['ExponentPushToken[a]'], 'title': 'Promo', 'body': 'Hi'}
    assert client.post('/send-notification', headers=auth(renter), json=payload).status_code == 403

    admin = user_factory('admin@example.com', role='admin')
    response = client.post('/send-notification', headers=auth(admin), json=payload)

    assert response.status_code == 200
    tickets = response.get_json()['tickets']
    assert [t['to'] for t in tickets] == ['ExponentPushToken[a]']
    assert tickets[0]['status'] == 'ok'


def test_send_notification_requires_tokens(client, auth, user_factory, push_client):
    admin = user_factory('admin@example.com', role='admin')

    assert client.post('/send-notification', headers=auth(admin), json={'tokens': []}).status_code == 400
    response = client.post('/send-notification', headers=auth(admin), json={'tokens': ['invalid']})
    assert response.status_code == 400
    assert push_client.published == []
