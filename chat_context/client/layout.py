"""Visibility of the menu and conversation surfaces."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping

from ..shared.events import EventChannel, StateChanged
from .chat_session import ChatSessionController
from .models import Channel


class View(str, Enum):
    MENU = "Menu"
    CHAT = "Chat"


@dataclass(frozen=True)
class LayoutState:
    menu: bool = False
    chat: bool = False


def derive_layout(visibility: Mapping[View, bool]) -> LayoutState:
    return LayoutState(menu=visibility.get(View.MENU, False), chat=visibility.get(View.CHAT, False))


class LayoutCoordinator:
    def __init__(self, chat: ChatSessionController, state_events: EventChannel):
        self._chat = chat
        self._state_events = state_events
        self._visibility: Dict[View, bool] = {view: False for view in View}

    @property
    def layout(self) -> LayoutState:
        return derive_layout(self._visibility)

    def show_menu(self) -> None:
        self._set(View.MENU, True)

    def hide_menu(self) -> None:
        self._set(View.MENU, False)

    def show_channel(self, channel: Channel) -> None:
        self._set(View.MENU, False)
        self._chat.select(channel)
        self._set(View.CHAT, True)

    def hide_channel(self) -> None:
        self._set(View.CHAT, False)

    def _set(self, view: View, visible: bool) -> None:
        if self._visibility[view] == visible:
            return
        self._visibility[view] = visible
        self._state_events.emit(StateChanged("layout"))
