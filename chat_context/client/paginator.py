"""Lazily extending, single-flight cursor over paginated backend queries."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Iterator, List, Optional, TypeVar

from ..shared.result import Failure, Result
from .backend import Page

T = TypeVar("T")

logger = logging.getLogger(__name__)

PageQuery = Callable[[], Awaitable[Result[Page[T]]]]


class PaginationCursor(Generic[T]):
    """Accumulates the pages of one backend listing in order.

    The presentation layer calls :meth:`fetch_next` whenever its boundary
    sentinel becomes visible. A fetch already in flight, or an exhausted
    cursor, turns the call into a no-op. A failed query stops the cursor and
    keeps the failure in :attr:`failure`, so an empty cursor can be told apart
    from one that could not load.
    """

    def __init__(self, query: PageQuery, timeout: Optional[float] = None):
        self._query = query
        self._timeout = timeout
        self._page: Optional[Page[T]] = None
        self.items: List[T] = []
        self.has_more = True
        self.fetching = False
        self.failure: Optional[Failure] = None

    @property
    def exhausted(self) -> bool:
        return not self.has_more

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    async def fetch_next(self) -> bool:
        """Fetch the next page; return True if a backend query was issued."""
        if self.fetching or not self.has_more:
            return False
        self.fetching = True
        try:
            result = await self._request()
            if isinstance(result, Failure):
                logger.warning("PAGE_FETCH_FAIL reason=%s loaded=%s", result.reason, len(self.items))
                self.failure = result
                self.has_more = False
                return True
            page = result.value
            self._page = page
            self.items.extend(page.items)
            self.has_more = page.has_next_page
            return True
        finally:
            self.fetching = False

    async def _request(self) -> Result[Page[T]]:
        call = self._query() if self._page is None else self._page.next_page()
        if self._timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, self._timeout)
        except asyncio.TimeoutError as exc:
            return Failure("timeout", exc)
