"""Expo push delivery.

Tokens are validated against the Expo format, messages are published in
provider-sized chunks and accepted tickets get one delayed receipt check.
Nothing here raises on delivery problems: failures are logged and the
caller gets whatever tickets the provider returned. There is no retry.
"""
import logging
import re

import requests
from exponent_server_sdk import PushClient, PushMessage, PushServerError

from app.utils.background import spawn_later

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'^Expo(nent)?PushToken\[.+\]$')
UUID_TOKEN_PATTERN = re.compile(
    r'^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$', re.IGNORECASE)


def is_push_token(token):
    if not isinstance(token, str):
        return False
    return bool(TOKEN_PATTERN.match(token) or UUID_TOKEN_PATTERN.match(token))


def ticket_to_dict(ticket):
    return {
        'to': ticket.push_message.to if ticket.push_message else None,
        'status': ticket.status,
        'id': ticket.id,
        'message': ticket.message,
        'details': ticket.details,
    }


class TimeoutSession(requests.Session):
    """Session applying a default timeout to every provider call."""

    def __init__(self, timeout=None):
        super().__init__()
        self.timeout = timeout

    def request(self, *args, **kwargs):
        if kwargs.get('timeout') is None:
            kwargs['timeout'] = self.timeout
        return super().request(*args, **kwargs)


class PushNotifier:
    def __init__(self, app=None):
        self.client = None
        self.chunk_size = 100
        self.receipt_delay = 5
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        session = TimeoutSession(timeout=app.config.get('PUSH_TIMEOUT'))
        session.headers.update({
            'accept': 'application/json',
            'accept-encoding': 'gzip, deflate',
            'content-type': 'application/json',
        })
        access_token = app.config.get('EXPO_ACCESS_TOKEN')
        if access_token:
            session.headers['Authorization'] = f'Bearer {access_token}'

        self.client = PushClient(session=session)
        self.chunk_size = app.config.get('PUSH_CHUNK_SIZE', 100)
        self.receipt_delay = app.config.get('PUSH_RECEIPT_DELAY', 5)
        app.extensions['push'] = self

    def build_message(self, token, title, body, data, sound=True, badge=True):
        return PushMessage(
            to=token,
            title=title,
            body=body,
            data={**data, '_displayInForeground': True},
            sound='default' if sound else None,
            badge=1 if badge else None,
            priority='high',
            channel_id='rental-updates' if data.get('type') == 'rentalUpdate' else 'default',
        )

    def send(self, tokens, title, body, data=None, sound=True, badge=True):
        """Publish one notification to every valid token; returns the tickets."""
        data = dict(data or {})
        if not tokens:
            logger.warning('No push tokens provided for "%s"', title)
            return []

        messages = []
        for token in tokens:
            if not is_push_token(token):
                logger.info('Skipping invalid push token: %s', token)
                continue
            messages.append(self.build_message(token, title, body, data, sound, badge))

        if not messages:
            logger.warning('No valid Expo push tokens for "%s"', title)
            return []

        logger.info('Sending "%s" to %d device(s)', title, len(messages))
        tickets = []
        for start in range(0, len(messages), self.chunk_size):
            chunk = messages[start:start + self.chunk_size]
            try:
                chunk_tickets = self.client.publish_multiple(chunk)
            except PushServerError as exc:
                logger.error('Push chunk of %d rejected: %s (errors=%s)',
                             len(chunk), exc, getattr(exc, 'errors', None))
                continue
            except requests.exceptions.RequestException as exc:
                logger.error('Push chunk of %d failed in transport: %s', len(chunk), exc)
                continue

            for ticket in chunk_tickets:
                if ticket.status == 'ok':
                    logger.debug('Push accepted for %s, ticket %s', ticket.push_message.to, ticket.id)
                else:
                    logger.warning('Push rejected for %s: %s %s',
                                   ticket.push_message.to, ticket.message, ticket.details)
            tickets.extend(chunk_tickets)

            accepted = [t for t in chunk_tickets if t.status == 'ok' and t.id]
            if accepted:
                spawn_later(self.receipt_delay, self.check_receipts, accepted)

        return tickets

    def check_receipts(self, tickets):
        logger.info('Checking %d push receipt(s)', len(tickets))
        try:
            receipts = self.client.check_receipts_multiple(tickets)
        except (PushServerError, requests.exceptions.RequestException) as exc:
            logger.error('Error checking push receipts: %s', exc)
            return []

        for receipt in receipts:
            if receipt.status != 'ok':
                logger.error('Push receipt %s reported an error: %s %s',
                             receipt.id, receipt.message, receipt.details)
        return receipts
