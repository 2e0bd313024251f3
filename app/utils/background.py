"""Fire-and-forget side effects (push dispatch, receipt checks, email).

Work runs in a Socket.IO background task inside a fresh app context. With
``NOTIFY_INLINE`` set the callable runs immediately in the caller's context,
which is what the test suite uses. Failures are logged and never reach the
caller.
"""
import logging
from flask import current_app

logger = logging.getLogger(__name__)


def _guarded(fn, args, kwargs):
    try:
        fn(*args, **kwargs)
    except Exception:
        logger.exception('Background task %s failed', getattr(fn, '__name__', fn))


def _run_in_context(app, delay, fn, args, kwargs):
    from app import socketio

    if delay:
        socketio.sleep(delay)
    with app.app_context():
        _guarded(fn, args, kwargs)


def spawn(fn, *args, **kwargs):
    spawn_later(0, fn, *args, **kwargs)


def spawn_later(delay, fn, *args, **kwargs):
    app = current_app._get_current_object()
    if app.config.get('NOTIFY_INLINE'):
        _guarded(fn, args, kwargs)
        return

    from app import socketio
    socketio.start_background_task(_run_in_context, app, delay, fn, args, kwargs)
