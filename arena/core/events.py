"""Session change notifications.

Handlers are registered with ``subscribe`` and removed with the returned token.
SIGNED_IN / SIGNED_OUT are delivered once per transition of a session: a repeat
of the session's last state is dropped. Sessions are told apart by user and by
the auth service's session id, so a second device signing in is still delivered.
TOKEN_REFRESHED is delivered every time.
"""

import logging
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Oldest sessions are forgotten past this many
MAX_TRACKED_SESSIONS = 10_000


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


SessionHandler = Callable[[SessionEvent, Optional[str]], None]
SessionKey = Tuple[Optional[str], Optional[str]]


class SessionEvents:
    def __init__(self, max_tracked: int = MAX_TRACKED_SESSIONS):
        self._handlers: Dict[str, SessionHandler] = {}
        self._last_state: "OrderedDict[SessionKey, SessionEvent]" = OrderedDict()
        self._max_tracked = max_tracked

    def subscribe(self, handler: SessionHandler) -> str:
        token = uuid.uuid4().hex
        self._handlers[token] = handler
        return token

    def unsubscribe(self, token: str) -> bool:
        return self._handlers.pop(token, None) is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    @property
    def tracked_sessions(self) -> int:
        return len(self._last_state)

    def emit(self, event: SessionEvent, user_id: Optional[str] = None, session_id: Optional[str] = None) -> int:
        """Delivers ``event`` to every current subscriber; returns how many were called."""
        if event is not SessionEvent.TOKEN_REFRESHED and not self._record(event, (user_id, session_id)):
            return 0

        delivered = 0
        # Handlers may unsubscribe while being called
        for token, handler in list(self._handlers.items()):
            try:
                handler(event, user_id)
            except Exception:
                logger.exception("Session handler %s failed on %s", token, event.value)
            delivered += 1
        return delivered

    def _record(self, event: SessionEvent, key: SessionKey) -> bool:
        """Stores the session's new state; False when it already was in that state."""
        if self._last_state.get(key) is event:
            return False
        self._last_state[key] = event
        self._last_state.move_to_end(key)
        while len(self._last_state) > self._max_tracked:
            self._last_state.popitem(last=False)
        return True
