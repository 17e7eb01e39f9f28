import pytest

from chat_context.client.app import ChatAppContext, ChatAppState
from chat_context.client.config import Settings
from chat_context.client.layout import LayoutState
from chat_context.client.models import TextMessageDraft
from chat_context.shared.events import CurrentUserChanged, StateChanged

from conftest import ALICE, BOB, DIRECT_AB, GROUP, FakeBackend


@pytest.mark.asyncio
async def test_direct_channel_seen_by_logged_in_user(context: ChatAppContext) -> None:
    await context.login("alice")
    cursor = context.joined_channels()
    await cursor.fetch_next()

    direct = cursor.items[0]
    assert direct == DIRECT_AB
    assert context.channel_display_name(direct) == BOB.display_name
    assert context.channel_display_picture(direct) == BOB.display_picture_url


@pytest.mark.asyncio
async def test_unread_count_failure_reads_as_zero(backend: FakeBackend, context: ChatAppContext) -> None:
    backend.unread[GROUP.id] = 4
    assert await context.channel_unread_messages_count(GROUP) == 4

    backend.failing.add("get_unread_messages_count")
    assert await context.channel_unread_messages_count(GROUP) == 0


@pytest.mark.asyncio
async def test_sent_draft_is_cleared(backend: FakeBackend, context: ChatAppContext) -> None:
    await context.login("alice")
    context.show_channel(DIRECT_AB)
    await context.update_message_draft(TextMessageDraft("hi"))

    await context.send_message_draft(TextMessageDraft("hi"))

    assert context.message_draft == TextMessageDraft("")
    assert backend.sent == [(DIRECT_AB.id, "hi")]


@pytest.mark.asyncio
async def test_snapshot_reflects_state(context: ChatAppContext) -> None:
    await context.login("alice")
    context.show_menu()
    context.show_channel(GROUP)
    await context.update_message_draft(TextMessageDraft("draft"))

    assert context.snapshot() == ChatAppState(
        current_user=ALICE,
        online=True,
        loading=False,
        layout=LayoutState(menu=False, chat=True),
        channel=GROUP,
        message_draft=TextMessageDraft("draft"),
    )


def test_start_chat_session_sets_active_channel(context: ChatAppContext) -> None:
    session = context.start_chat_session(GROUP, lambda message: None)

    assert context.chat_session is session
    assert context.channel == GROUP


def test_state_changes_are_published(backend: FakeBackend, context: ChatAppContext) -> None:
    seen = []
    context.events.subscribe(StateChanged, lambda event: seen.append(event.field))

    backend.events.emit(CurrentUserChanged(ALICE))
    context.show_menu()
    context.discard_message_draft()

    assert seen == ["current_user", "layout", "message_draft"]


@pytest.mark.asyncio
async def test_close_tears_everything_down(backend: FakeBackend, context: ChatAppContext) -> None:
    await context.login("alice")
    session = context.start_chat_session(DIRECT_AB, lambda message: None)

    await context.close()

    assert not session.active
    assert backend.count("end_session") == 1
    assert context.current_user is None
    assert backend.events.subscriber_count(CurrentUserChanged) == 0
    assert backend.closed


@pytest.mark.asyncio
async def test_async_context_manager_opens_and_closes(backend: FakeBackend) -> None:
    async with ChatAppContext(backend) as context:
        assert context.session.started

    assert not context.session.started
    assert backend.count("end_session") == 0


def test_from_settings_requires_server_url() -> None:
    with pytest.raises(RuntimeError):
        ChatAppContext.from_settings(Settings(server_url=""))


def test_from_settings_builds_http_backend(tmp_path) -> None:
    context = ChatAppContext.from_settings(
        Settings(server_url="http://chat.test/", page_size=10, log_file=tmp_path / "client.log")
    )

    assert context.backend.base_url == "http://chat.test"
    assert context.backend.page_size == 10
    context.backend.close()
