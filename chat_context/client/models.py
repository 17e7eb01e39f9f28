"""Client-side models for users, channels, messages and compose drafts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple, Union


@dataclass(frozen=True)
class User:
    id: int
    name: str
    display_name: str
    display_picture_url: Optional[str] = None


class ChannelType(str, Enum):
    DIRECT = "DIRECT"
    GROUP = "GROUP"


@dataclass(frozen=True)
class Channel:
    id: int
    type: ChannelType
    name: str
    members: Tuple[User, ...] = ()

    @property
    def is_direct(self) -> bool:
        return self.type is ChannelType.DIRECT


@dataclass(frozen=True)
class Message:
    id: int
    channel_id: int
    body: str
    user: Optional[User] = None
    created_at: Optional[datetime] = None


MessageHandler = Callable[[Message], None]


@dataclass
class ChatSession:
    """Live binding of the client to one channel.

    ``on_end`` is supplied by the backend and releases whatever keeps the
    session delivering messages.
    """

    channel: Channel
    on_received_message: MessageHandler
    on_end: Optional[Callable[[], None]] = field(default=None, repr=False)
    active: bool = True

    def end(self) -> None:
        if not self.active:
            return
        self.active = False
        if self.on_end is not None:
            self.on_end()


class MessageDraftType(str, Enum):
    TEXT = "TEXT"
    FILE = "FILE"


@dataclass(frozen=True)
class TextMessageDraft:
    text: str = ""
    type: MessageDraftType = field(default=MessageDraftType.TEXT, init=False)


@dataclass(frozen=True)
class FileMessageDraft:
    path: Path
    type: MessageDraftType = field(default=MessageDraftType.FILE, init=False)


MessageDraft = Union[TextMessageDraft, FileMessageDraft]

EMPTY_DRAFT = TextMessageDraft()
