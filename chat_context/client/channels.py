"""Joined channels, user listing and per-channel display metadata."""
from __future__ import annotations

from typing import List, Optional

from .backend import ChatBackend
from .models import Channel, User
from .paginator import PaginationCursor
from .session import SessionController


class ChannelDirectory:
    def __init__(self, backend: ChatBackend, session: SessionController, query_timeout: Optional[float] = None):
        self._backend = backend
        self._session = session
        self._query_timeout = query_timeout

    def joined_channels(self) -> PaginationCursor[Channel]:
        return PaginationCursor(lambda: self._backend.get_channels(joined=True), timeout=self._query_timeout)

    def users(self) -> PaginationCursor[User]:
        return PaginationCursor(self._backend.get_users, timeout=self._query_timeout)

    def display_name(self, channel: Channel) -> str:
        """Direct channels are named after the other members, others by their own name."""
        if channel.is_direct:
            return ", ".join(member.display_name for member in self._other_members(channel))
        return channel.name

    def display_picture(self, channel: Channel) -> Optional[str]:
        """The other member's picture for a two-member direct channel, else None."""
        if channel.is_direct and len(channel.members) == 2:
            others = self._other_members(channel)
            if others:
                return others[0].display_picture_url
        return None

    def _other_members(self, channel: Channel) -> List[User]:
        user = self._session.current_user
        current_id = user.id if user is not None else None
        return [member for member in channel.members if member.id != current_id]
