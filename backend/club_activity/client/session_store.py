import json
import logging
from typing import Any, Callable

from .storage import KeyValueStorage, MemoryStorage

logger = logging.getLogger(__name__)

SESSION_KEY = "sca_session"
USERNAME_HEADER = "x-username"
SESSION_ID_HEADER = "x-session-id"

Session = dict[str, Any]
Subscriber = Callable[[Session | None], None]


class SessionStore:
    """Owns the single persisted "current session" record.

    Every ``save`` and ``clear`` is announced to subscribers, which receive
    the new session (or ``None``) so they can react without polling.
    """

    def __init__(self, storage: KeyValueStorage | None = None, key: str = SESSION_KEY) -> None:
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, session: Session | None) -> None:
        for callback in list(self._subscribers):
            try:
                callback(session)
            except Exception:
                logger.exception("Session subscriber %r failed", callback)

    def save(self, session: Session) -> None:
        self.storage.set_item(self.key, json.dumps(session))
        self._notify(dict(session))

    def get(self) -> Session | None:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return None
        try:
            session = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return session if isinstance(session, dict) else None

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        self._notify(None)

    def auth_headers(self) -> dict[str, str]:
        session = self.get()
        if not session:
            return {}
        return {
            USERNAME_HEADER: str(session.get("username", "")),
            SESSION_ID_HEADER: str(session.get("sessionId", "")),
        }
