"""On-demand unread message counts."""
import logging

from ..shared.result import Failure
from .backend import ChatBackend
from .models import Channel

logger = logging.getLogger(__name__)


class UnreadCounter:
    def __init__(self, backend: ChatBackend):
        self._backend = backend

    async def count(self, channel: Channel) -> int:
        """Unread messages in ``channel``; 0 when the backend cannot tell."""
        result = await self._backend.get_unread_messages_count(channel)
        if isinstance(result, Failure):
            logger.debug("UNREAD_COUNT_FAIL channel_id=%s reason=%s", channel.id, result.reason)
            return 0
        return result.value
