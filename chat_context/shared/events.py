"""Typed observer channel with explicit subscription handles."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, DefaultDict, List, Optional, Type, TypeVar

if TYPE_CHECKING:
    from ..client.models import Channel, User

E = TypeVar("E")

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class CurrentUserChanged:
    user: Optional[User]


@dataclass(frozen=True)
class CurrentUserOnline:
    pass


@dataclass(frozen=True)
class CurrentUserOffline:
    pass


@dataclass(frozen=True)
class ActiveChannelChanged:
    channel: Optional[Channel]


@dataclass(frozen=True)
class StateChanged:
    field: str


class Subscription:
    """Handle returned by :meth:`EventChannel.subscribe`."""

    def __init__(self, channel: "EventChannel", event_type: type, handler: Handler):
        self._channel = channel
        self.event_type = event_type
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._channel._remove(self)
            self.active = False


class EventChannel:
    """Dispatches events synchronously, in emission order, to handlers registered per type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[type, List[Subscription]] = defaultdict(list)

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> Subscription:
        subscription = Subscription(self, event_type, handler)
        self._handlers[event_type].append(subscription)
        return subscription

    def emit(self, event: Any) -> None:
        # Copy so handlers may unsubscribe while being dispatched.
        for subscription in list(self._handlers.get(type(event), ())):
            if subscription.active:
                subscription.handler(event)

    def subscriber_count(self, event_type: type) -> int:
        return len(self._handlers.get(event_type, ()))

    def _remove(self, subscription: Subscription) -> None:
        handlers = self._handlers.get(subscription.event_type)
        if handlers and subscription in handlers:
            handlers.remove(subscription)


__all__ = [
    "ActiveChannelChanged",
    "CurrentUserChanged",
    "CurrentUserOffline",
    "CurrentUserOnline",
    "EventChannel",
    "StateChanged",
    "Subscription",
]
