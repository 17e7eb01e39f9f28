"""Application context tying the chat components to one backend client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..shared.events import EventChannel
from ..shared.result import Result
from .api import HttpChatBackend
from .backend import ChatBackend
from .channels import ChannelDirectory
from .chat_session import ChatSessionController
from .config import Settings, get_settings
from .drafts import DraftSynchronizer
from .layout import LayoutCoordinator, LayoutState
from .logging_config import configure_logging
from .models import Channel, ChatSession, Message, MessageDraft, MessageHandler, TextMessageDraft, User
from .paginator import PaginationCursor
from .session import SessionController
from .unread import UnreadCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatAppState:
    """Everything the presentation layer renders, at one point in time."""

    current_user: Optional[User]
    online: bool
    loading: bool
    layout: LayoutState
    channel: Optional[Channel]
    message_draft: MessageDraft


class ChatAppContext:
    """Explicitly constructed owner of the backend client and every component.

    ``open()`` subscribes to backend identity and presence events and
    ``close()`` tears everything down again. ``events`` republishes every
    state change as ``StateChanged`` or ``ActiveChannelChanged``.
    """

    def __init__(self, backend: ChatBackend, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.backend = backend
        self.events = EventChannel()
        self.session = SessionController(backend, self.events)
        self.chat = ChatSessionController(backend, self.events, query_timeout=self.settings.query_timeout)
        self.directory = ChannelDirectory(backend, self.session, query_timeout=self.settings.query_timeout)
        self.unread = UnreadCounter(backend)
        self.drafts = DraftSynchronizer(
            backend, self.chat, self.events, keystroke_interval=self.settings.keystroke_interval
        )
        self.layout_coordinator = LayoutCoordinator(self.chat, self.events)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ChatAppContext":
        settings = settings or get_settings()
        if not settings.server_url:
            raise RuntimeError("Server URL not configured")
        configure_logging(settings.log_file)
        backend = HttpChatBackend(
            settings.server_url,
            timeout=settings.request_timeout,
            poll_interval=settings.poll_interval,
            page_size=settings.page_size,
        )
        logger.info("BACKEND_CONFIGURED server_url=%s", settings.server_url)
        return cls(backend, settings)

    def open(self) -> "ChatAppContext":
        self.session.start()
        return self

    async def close(self) -> None:
        self.chat.end()
        if self.session.current_user is not None:
            await self.session.logout()
        self.session.stop()
        self.drafts.close()
        self.backend.close()

    async def __aenter__(self) -> "ChatAppContext":
        return self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # State

    @property
    def current_user(self) -> Optional[User]:
        return self.session.current_user

    @property
    def online(self) -> bool:
        return self.session.online

    @property
    def loading(self) -> bool:
        return self.session.loading

    @property
    def layout(self) -> LayoutState:
        return self.layout_coordinator.layout

    @property
    def channel(self) -> Optional[Channel]:
        return self.chat.channel

    @property
    def chat_session(self) -> Optional[ChatSession]:
        return self.chat.session

    @property
    def message_draft(self) -> MessageDraft:
        return self.drafts.draft

    def snapshot(self) -> ChatAppState:
        return ChatAppState(
            current_user=self.current_user,
            online=self.online,
            loading=self.loading,
            layout=self.layout,
            channel=self.channel,
            message_draft=self.message_draft,
        )

    # Actions

    async def login(self, username: str) -> Result[User]:
        return await self.session.login(username)

    async def logout(self) -> Result[None]:
        return await self.session.logout()

    def users(self) -> PaginationCursor[User]:
        return self.directory.users()

    def joined_channels(self) -> PaginationCursor[Channel]:
        return self.directory.joined_channels()

    def channel_display_name(self, channel: Channel) -> str:
        return self.directory.display_name(channel)

    def channel_display_picture(self, channel: Channel) -> Optional[str]:
        return self.directory.display_picture(channel)

    async def channel_unread_messages_count(self, channel: Channel) -> int:
        return await self.unread.count(channel)

    def channel_messages(self, channel: Channel) -> PaginationCursor[Message]:
        return self.chat.messages(channel)

    def start_chat_session(self, channel: Channel, on_received_message: MessageHandler) -> Optional[ChatSession]:
        return self.chat.start(channel, on_received_message)

    async def update_message_draft(self, draft: TextMessageDraft) -> None:
        await self.drafts.update_draft(draft)

    def discard_message_draft(self) -> None:
        self.drafts.discard_draft()

    async def send_message_draft(self, draft: MessageDraft) -> Optional[Result[Message]]:
        return await self.drafts.send_draft(draft)

    def show_menu(self) -> None:
        self.layout_coordinator.show_menu()

    def hide_menu(self) -> None:
        self.layout_coordinator.hide_menu()

    def show_channel(self, channel: Channel) -> None:
        self.layout_coordinator.show_channel(channel)


__all__ = ["ChatAppContext", "ChatAppState"]
