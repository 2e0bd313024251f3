import logging
import threading

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Which users hold an open socket, keyed by user id.

    Process-local: a restart or a second server process reports everybody as
    offline until their client emits ``addUser`` again.
    """

    def __init__(self):
        self._sids = {}
        self._lock = threading.Lock()

    def add(self, user_id, sid):
        """Point ``user_id`` at ``sid``; the latest connection wins.

        Returns False when the user was already registered on that socket.
        """
        key = str(user_id)
        with self._lock:
            previous = self._sids.get(key)
            if previous == sid:
                return False
            self._sids[key] = sid
        if previous is None:
            logger.info('User %s online on socket %s', key, sid)
        else:
            logger.info('User %s moved from socket %s to %s', key, previous, sid)
        return True

    def remove(self, sid):
        with self._lock:
            for key, owner in list(self._sids.items()):
                if owner == sid:
                    del self._sids[key]
                    logger.info('User %s offline (socket %s closed)', key, sid)
                    return key
        return None

    def lookup(self, user_id):
        if user_id is None:
            return None
        with self._lock:
            return self._sids.get(str(user_id))

    def is_online(self, user_id):
        return self.lookup(user_id) is not None

    def snapshot(self):
        with self._lock:
            return [{'user_id': key, 'sid': sid} for key, sid in self._sids.items()]

    def clear(self):
        with self._lock:
            self._sids.clear()


presence = PresenceRegistry()
