import pytest

from chat_context.client.session import SessionController
from chat_context.shared.events import (
    CurrentUserChanged,
    CurrentUserOffline,
    CurrentUserOnline,
    EventChannel,
    StateChanged,
)
from chat_context.shared.result import Failure, Success

from conftest import ALICE, BOB, FakeBackend


@pytest.fixture
def state_events() -> EventChannel:
    return EventChannel()


@pytest.fixture
def controller(backend: FakeBackend, state_events: EventChannel) -> SessionController:
    controller = SessionController(backend, state_events)
    controller.start()
    return controller


def test_start_subscribes_once(backend: FakeBackend, controller: SessionController) -> None:
    controller.start()

    assert backend.events.subscriber_count(CurrentUserChanged) == 1
    assert backend.events.subscriber_count(CurrentUserOnline) == 1
    assert backend.events.subscriber_count(CurrentUserOffline) == 1


def test_stop_releases_subscriptions(backend: FakeBackend, controller: SessionController) -> None:
    controller.stop()
    backend.events.emit(CurrentUserChanged(ALICE))

    assert controller.current_user is None
    assert backend.events.subscriber_count(CurrentUserChanged) == 0
    assert not controller.started


def test_events_update_state_in_delivery_order(backend: FakeBackend, controller: SessionController) -> None:
    backend.events.emit(CurrentUserChanged(ALICE))
    backend.events.emit(CurrentUserOnline())
    backend.events.emit(CurrentUserChanged(BOB))
    backend.events.emit(CurrentUserOffline())

    assert controller.current_user == BOB
    assert controller.online is False


@pytest.mark.asyncio
async def test_login_republishes_backend_identity(backend: FakeBackend, controller: SessionController) -> None:
    result = await controller.login("alice")

    assert isinstance(result, Success)
    assert controller.current_user == ALICE
    assert controller.online is True
    assert controller.loading is False


@pytest.mark.asyncio
async def test_loading_is_set_while_login_is_pending(
    backend: FakeBackend, controller: SessionController, state_events: EventChannel
) -> None:
    seen = []
    state_events.subscribe(StateChanged, lambda event: seen.append((event.field, controller.loading)))

    await controller.login("alice")

    assert ("loading", True) in seen
    assert seen[-1] == ("loading", False)


@pytest.mark.asyncio
async def test_failed_login_leaves_identity_unset(backend: FakeBackend, controller: SessionController) -> None:
    backend.failing.add("start_session")

    result = await controller.login("alice")

    assert isinstance(result, Failure)
    assert controller.current_user is None
    assert controller.loading is False


@pytest.mark.asyncio
async def test_logout_identity_cleared_by_backend_event(backend: FakeBackend, controller: SessionController) -> None:
    await controller.login("alice")

    await controller.logout()

    assert controller.current_user is None
    assert controller.online is False


@pytest.mark.asyncio
async def test_logout_does_not_clear_identity_itself(backend: FakeBackend, controller: SessionController) -> None:
    await controller.login("alice")
    backend.failing.add("end_session")

    result = await controller.logout()

    assert isinstance(result, Failure)
    assert controller.current_user == ALICE
