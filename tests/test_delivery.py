"""A message that reaches both delivery triggers is pushed once."""


def post_message(client, auth, sender, receiver, car, content):
    return client.post('/api/v1/messages', headers=auth(sender), json={
        'receiver_id': receiver.id,
        'car_id': car.id,
        'content': content,
    })


def test_rest_message_pushes_offline_receiver(client, auth, renter, owner, car, push_client):
    response = post_message(client, auth, renter, owner, car, 'Is it free this weekend?')

    assert response.status_code == 201
    assert [m.to for m in push_client.messages] == ['ExponentPushToken[owner-device]']
    message = push_client.messages[0]
    assert message.title == 'Rafael Renter • Toyota Vios'
    assert message.data['message_id'] == response.get_json()['message']['id']


def test_rest_and_socket_push_once(socket_client_factory, client, auth, renter, owner, car, push_client):
    sender = socket_client_factory()
    sender.emit('addUser', renter.id)
    sender.emit('joinRoom', {'sender_id': renter.id, 'receiver_id': owner.id, 'car_id': car.id})

    created = post_message(client, auth, renter, owner, car, 'Hello!').get_json()['message']
    # The client relays the stored message over the socket as well
    sender.emit('sendMessage', created)

    assert len(push_client.messages) == 1


def test_online_receiver_gets_no_push(socket_client_factory, client, auth, renter, owner, car, push_client):
    receiver = socket_client_factory()
    receiver.emit('addUser', owner.id)

    post_message(client, auth, renter, owner, car, 'You there?')

    assert push_client.published == []


def test_failed_message_triggers_nothing(client, auth, renter, owner, car, push_client):
    response = post_message(client, auth, renter, owner, car, '')
    assert response.status_code == 400
    assert push_client.published == []


def test_push_failure_does_not_fail_the_request(client, auth, renter, owner, car, push_client):
    push_client.failing_chunks = {0}

    response = post_message(client, auth, renter, owner, car, 'Still saved')

    assert response.status_code == 201
    assert len(push_client.published) == 1
