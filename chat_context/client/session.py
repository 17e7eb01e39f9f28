"""Current-user identity and presence, driven by backend events."""
from __future__ import annotations

import logging
from typing import List, Optional

from ..shared.events import (
    CurrentUserChanged,
    CurrentUserOffline,
    CurrentUserOnline,
    EventChannel,
    StateChanged,
    Subscription,
)
from ..shared.result import Failure, Result
from .backend import ChatBackend
from .models import User

logger = logging.getLogger(__name__)


class SessionController:
    """Owns ``current_user``, ``online`` and ``loading``.

    Commands only talk to the backend. Local identity changes exclusively
    through the backend's ``CurrentUserChanged`` events, so a logout is
    reflected once the backend reports the user gone.
    """

    def __init__(self, backend: ChatBackend, state_events: EventChannel):
        self._backend = backend
        self._state_events = state_events
        self._subscriptions: List[Subscription] = []
        self.current_user: Optional[User] = None
        self.online = False
        self.loading = False

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        if self._subscriptions:
            return
        events = self._backend.events
        self._subscriptions = [
            events.subscribe(CurrentUserChanged, self._on_current_user_changed),
            events.subscribe(CurrentUserOnline, self._on_online),
            events.subscribe(CurrentUserOffline, self._on_offline),
        ]

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    async def login(self, username: str) -> Result[User]:
        self._set_loading(True)
        try:
            result = await self._backend.start_session(username)
        finally:
            self._set_loading(False)
        if isinstance(result, Failure):
            logger.info("LOGIN_FAIL username=%s reason=%s", username, result.reason)
        else:
            logger.info("LOGIN_SUCCESS username=%s user_id=%s", username, result.value.id)
        return result

    async def logout(self) -> Result[None]:
        result = await self._backend.end_session()
        if isinstance(result, Failure):
            logger.warning("LOGOUT_FAIL reason=%s", result.reason)
        return result

    def _set_loading(self, loading: bool) -> None:
        self.loading = loading
        self._state_events.emit(StateChanged("loading"))

    def _on_current_user_changed(self, event: CurrentUserChanged) -> None:
        self.current_user = event.user
        self._state_events.emit(StateChanged("current_user"))

    def _on_online(self, _: CurrentUserOnline) -> None:
        self.online = True
        self._state_events.emit(StateChanged("online"))

    def _on_offline(self, _: CurrentUserOffline) -> None:
        self.online = False
        self._state_events.emit(StateChanged("online"))
