def chat_room_id(sender_id, receiver_id, car_id):
    """Room shared by both participants of a conversation about one car."""
    return '-'.join(sorted(str(part) for part in (sender_id, receiver_id, car_id)))
