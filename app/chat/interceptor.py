"""Response hook that turns a successful ``POST /messages`` into a push.

It only looks at the JSON the endpoint returned, so the view itself stays
unaware of push delivery. Deduplication against the socket path happens in
the notifier.
"""
import logging
from flask import request
from app import notifier
from app.chat import bp
from app.services.notifier import message_fields
from app.utils.background import spawn

logger = logging.getLogger(__name__)


@bp.after_request
def push_created_message(response):
    if request.method != 'POST' or request.endpoint != 'chat.send_message':
        return response
    if response.status_code != 201 or not response.is_json:
        return response

    payload = response.get_json(silent=True) or {}
    fields = message_fields(payload.get('message'))
    if fields is None:
        logger.warning('Created-message response without sender/receiver/car ids')
        return response

    spawn(notifier.notify_new_message, **fields)
    return response
