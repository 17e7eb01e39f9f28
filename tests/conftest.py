import asyncio
from typing import Dict, List, Optional, Set

import pytest

from chat_context.client.app import ChatAppContext
from chat_context.client.models import Channel, ChannelType, ChatSession, Message, User
from chat_context.shared.events import CurrentUserChanged, CurrentUserOffline, CurrentUserOnline, EventChannel
from chat_context.shared.result import Failure, Success

ALICE = User(id=1, name="alice", display_name="Alice", display_picture_url="https://cdn.test/alice.png")
BOB = User(id=2, name="bob", display_name="Bob", display_picture_url="https://cdn.test/bob.png")
CAROL = User(id=3, name="carol", display_name="Carol", display_picture_url="https://cdn.test/carol.png")

DIRECT_AB = Channel(id=10, type=ChannelType.DIRECT, name="", members=(ALICE, BOB))
DIRECT_ABC = Channel(id=11, type=ChannelType.DIRECT, name="", members=(ALICE, BOB, CAROL))
GROUP = Channel(id=20, type=ChannelType.GROUP, name="general", members=(ALICE, BOB))


class FakePage:
    def __init__(self, backend: "FakeBackend", pages: List[list], index: int = 0):
        self._backend = backend
        self._pages = pages
        self._index = index

    @property
    def items(self) -> list:
        return self._pages[self._index]

    @property
    def has_next_page(self) -> bool:
        return self._index + 1 < len(self._pages)

    async def next_page(self):
        return await self._backend._respond("next_page", lambda: FakePage(self._backend, self._pages, self._index + 1))


class FakeBackend:
    """In-memory backend recording every call."""

    def __init__(self) -> None:
        self.events = EventChannel()
        self.users = {user.name: user for user in (ALICE, BOB, CAROL)}
        self.user_pages: List[list] = [[ALICE, BOB], [CAROL]]
        self.channel_pages: List[list] = [[DIRECT_AB, GROUP]]
        self.message_pages: Dict[int, List[list]] = {}
        self.unread: Dict[int, int] = {}
        self.failing: Set[str] = set()
        self.calls: List[tuple] = []
        self.keystrokes: List[tuple] = []
        self.sent: List[tuple] = []
        self.ended_sessions: List[ChatSession] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def _respond(self, name: str, produce):
        self.calls.append((name,))
        if self.gate is not None:
            await self.gate.wait()
        if name in self.failing:
            return Failure(f"{name} failed")
        return Success(produce())

    async def start_session(self, username: str):
        result = await self._respond("start_session", lambda: self.users[username])
        if isinstance(result, Success):
            self.events.emit(CurrentUserChanged(result.value))
            self.events.emit(CurrentUserOnline())
        return result

    async def end_session(self):
        result = await self._respond("end_session", lambda: None)
        if isinstance(result, Success):
            self.events.emit(CurrentUserOffline())
            self.events.emit(CurrentUserChanged(None))
        return result

    async def get_users(self):
        return await self._respond("get_users", lambda: FakePage(self, self.user_pages))

    async def get_channels(self, joined: bool = True):
        return await self._respond("get_channels", lambda: FakePage(self, self.channel_pages))

    async def get_messages(self, channel: Channel):
        return await self._respond("get_messages", lambda: FakePage(self, self.message_pages.get(channel.id, [[]])))

    async def get_unread_messages_count(self, channel: Channel):
        return await self._respond("get_unread_messages_count", lambda: self.unread.get(channel.id, 0))

    async def send_keystrokes(self, channel: Channel, keys: str):
        self.keystrokes.append((channel.id, keys))
        return await self._respond("send_keystrokes", lambda: None)

    async def send_message(self, channel: Channel, body: str):
        self.sent.append((channel.id, body))
        return await self._respond("send_message", lambda: Message(id=len(self.sent), channel_id=channel.id, body=body))

    def start_chat_session(self, channel: Channel, on_received_message):
        self.calls.append(("start_chat_session",))
        if "start_chat_session" in self.failing:
            return Failure("start_chat_session failed")
        session = ChatSession(channel=channel, on_received_message=on_received_message)
        session.on_end = lambda: self.ended_sessions.append(session)
        return Success(session)

    def deliver(self, session: ChatSession, message: Message) -> None:
        if session.active:
            session.on_received_message(message)

    def close(self) -> None:
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def context(backend: FakeBackend) -> ChatAppContext:
    return ChatAppContext(backend).open()
