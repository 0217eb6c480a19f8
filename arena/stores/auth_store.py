from typing import Optional

from arena.core.events import SessionEvent, SessionEvents
from arena.schemas.auth_schemas import AuthUser


class AuthStore:
    """Signed-in user for one request.

    Created by the session guard, bound to the app's session events while the
    request runs, and unbound when it finishes.
    """

    def __init__(self):
        self.user: Optional[AuthUser] = None
        self.loading: bool = True
        self._events: Optional[SessionEvents] = None
        self._token: Optional[str] = None

    def set_user(self, user: Optional[AuthUser]) -> None:
        self.user = user

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def bind(self, events: SessionEvents) -> None:
        self.unbind()
        self._events = events
        self._token = events.subscribe(self._on_session_change)

    def unbind(self) -> None:
        if self._events is not None and self._token is not None:
            self._events.unsubscribe(self._token)
        self._events = None
        self._token = None

    def _on_session_change(self, event: SessionEvent, user_id: Optional[str]) -> None:
        if event is SessionEvent.SIGNED_OUT and self.user is not None and self.user.id == user_id:
            self.user = None
