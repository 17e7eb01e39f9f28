"""Compose draft of the active channel: typing signals and sending."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..shared.events import ActiveChannelChanged, EventChannel, StateChanged
from ..shared.result import Failure, Result, Success
from .backend import ChatBackend
from .chat_session import ChatSessionController
from .models import EMPTY_DRAFT, Message, MessageDraft, TextMessageDraft

logger = logging.getLogger(__name__)


class DraftSynchronizer:
    """Keeps the local draft of the active channel in step with the backend.

    Every edit is forwarded as a keystroke signal unless ``keystroke_interval``
    is set, in which case signals closer together than the interval are
    dropped; the draft itself is always stored. Changing the active channel
    throws the draft away.
    """

    def __init__(
        self,
        backend: ChatBackend,
        chat: ChatSessionController,
        state_events: EventChannel,
        keystroke_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._backend = backend
        self._chat = chat
        self._state_events = state_events
        self._keystroke_interval = keystroke_interval
        self._clock = clock
        self._last_keystroke_at: Optional[float] = None
        self._edits = 0
        self.draft: MessageDraft = EMPTY_DRAFT
        self._subscription = state_events.subscribe(ActiveChannelChanged, self._on_channel_changed)

    async def update_draft(self, draft: TextMessageDraft) -> None:
        channel = self._chat.channel
        if channel is None:
            return
        self._edits += 1
        edit = self._edits
        if self._should_signal():
            self._last_keystroke_at = self._clock()
            result = await self._backend.send_keystrokes(channel, draft.text)
            if isinstance(result, Failure):
                logger.debug("KEYSTROKES_FAIL channel_id=%s reason=%s", channel.id, result.reason)
        # A newer edit or a channel switch happened while the signal was in flight.
        if edit != self._edits:
            return
        self._set(draft)

    def discard_draft(self) -> None:
        self._set(EMPTY_DRAFT)

    async def send_draft(self, draft: MessageDraft) -> Optional[Result[Message]]:
        channel = self._chat.channel
        if channel is None:
            return None
        if not isinstance(draft, TextMessageDraft):
            logger.debug("DRAFT_UNSUPPORTED channel_id=%s type=%s", channel.id, draft.type.value)
            return None
        result = await self._backend.send_message(channel, draft.text)
        if isinstance(result, Success):
            logger.info("MESSAGE_SENT channel_id=%s message_id=%s", channel.id, result.value.id)
            self.discard_draft()
        else:
            logger.warning("MESSAGE_SEND_FAIL channel_id=%s reason=%s", channel.id, result.reason)
        return result

    def close(self) -> None:
        self._subscription.unsubscribe()

    def _should_signal(self) -> bool:
        if self._keystroke_interval <= 0 or self._last_keystroke_at is None:
            return True
        return self._clock() - self._last_keystroke_at >= self._keystroke_interval

    def _set(self, draft: MessageDraft) -> None:
        self.draft = draft
        self._state_events.emit(StateChanged("message_draft"))

    def _on_channel_changed(self, _: ActiveChannelChanged) -> None:
        self._edits += 1
        self._last_keystroke_at = None
        self.discard_draft()
