"""Contract of the remote chat backend consumed by the client components."""
from __future__ import annotations

from typing import List, Protocol, TypeVar

from ..shared.events import EventChannel
from ..shared.result import Result
from .models import Channel, ChatSession, Message, MessageHandler, User

T_co = TypeVar("T_co", covariant=True)


class Page(Protocol[T_co]):
    """One page of a backend list query."""

    @property
    def items(self) -> List[T_co]: ...

    @property
    def has_next_page(self) -> bool: ...

    async def next_page(self) -> "Result[Page[T_co]]": ...


class ChatBackend(Protocol):
    """Opaque RPC-style client for the chat service.

    Every call reports its outcome as a :class:`~chat_context.shared.result.Result`;
    remote errors are never raised. Identity and presence changes are published
    on ``events`` as ``CurrentUserChanged``, ``CurrentUserOnline`` and
    ``CurrentUserOffline``.
    """

    events: EventChannel

    async def start_session(self, username: str) -> Result[User]: ...

    async def end_session(self) -> Result[None]: ...

    async def get_users(self) -> Result[Page[User]]: ...

    async def get_channels(self, joined: bool = True) -> Result[Page[Channel]]: ...

    async def get_messages(self, channel: Channel) -> Result[Page[Message]]: ...

    async def get_unread_messages_count(self, channel: Channel) -> Result[int]: ...

    async def send_keystrokes(self, channel: Channel, keys: str) -> Result[None]: ...

    async def send_message(self, channel: Channel, body: str) -> Result[Message]: ...

    def start_chat_session(self, channel: Channel, on_received_message: MessageHandler) -> Result[ChatSession]: ...

    def close(self) -> None: ...
