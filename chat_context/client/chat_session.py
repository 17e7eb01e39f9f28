"""Active conversation and its single live chat session."""
from __future__ import annotations

import logging
from typing import Optional

from ..shared.events import ActiveChannelChanged, EventChannel
from ..shared.result import Failure
from .backend import ChatBackend
from .models import Channel, ChatSession, Message, MessageHandler
from .paginator import PaginationCursor

logger = logging.getLogger(__name__)


class ChatSessionController:
    """Binds the client to at most one channel for live message exchange.

    ``Idle -> Active -> Idle``. Starting a session while another is active
    replaces it: the previous session is ended once the new one is up. A
    failed start leaves the current session alone.
    """

    def __init__(self, backend: ChatBackend, state_events: EventChannel, query_timeout: Optional[float] = None):
        self._backend = backend
        self._state_events = state_events
        self._query_timeout = query_timeout
        self._session: Optional[ChatSession] = None
        self.channel: Optional[Channel] = None

    @property
    def session(self) -> Optional[ChatSession]:
        """The live session, or None once it has ended, whoever ended it."""
        if self._session is not None and self._session.active:
            return self._session
        return None

    @property
    def active(self) -> bool:
        return self.session is not None

    def start(self, channel: Channel, on_received_message: MessageHandler) -> Optional[ChatSession]:
        result = self._backend.start_chat_session(channel, on_received_message)
        if isinstance(result, Failure):
            logger.warning("CHAT_SESSION_FAIL channel_id=%s reason=%s", channel.id, result.reason)
            return None
        previous = self.session
        self._session = result.value
        if previous is not None and previous is not self._session:
            previous.end()
            logger.info("CHAT_SESSION_ENDED channel_id=%s", previous.channel.id)
        logger.info("CHAT_SESSION_STARTED channel_id=%s", channel.id)
        self.select(channel)
        return self._session

    def end(self) -> None:
        if self._session is None:
            return
        session, self._session = self._session, None
        session.end()
        logger.info("CHAT_SESSION_ENDED channel_id=%s", session.channel.id)

    def select(self, channel: Optional[Channel]) -> None:
        previous_id = self.channel.id if self.channel is not None else None
        self.channel = channel
        if (channel.id if channel is not None else None) != previous_id:
            self._state_events.emit(ActiveChannelChanged(channel))

    def messages(self, channel: Channel) -> PaginationCursor[Message]:
        return PaginationCursor(lambda: self._backend.get_messages(channel), timeout=self._query_timeout)
