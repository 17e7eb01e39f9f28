"""HTTP backend client for interacting with the chat server."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from ..shared.events import CurrentUserChanged, CurrentUserOffline, CurrentUserOnline, EventChannel
from ..shared.result import Failure, Result, Success
from . import schemas
from .models import Channel, ChatSession, Message, MessageHandler, User

T = TypeVar("T")

logger = logging.getLogger(__name__)


class HttpPage(Generic[T]):
    """One page of a ``{"items": [...], "next_page": n}`` listing."""

    def __init__(
        self,
        backend: "HttpChatBackend",
        path: str,
        params: Dict[str, Any],
        schema: Type[BaseModel],
        items: List[T],
        next_page: Optional[int],
    ):
        self._backend = backend
        self._path = path
        self._params = params
        self._schema = schema
        self._items = items
        self._next_page = next_page

    @property
    def items(self) -> List[T]:
        return self._items

    @property
    def has_next_page(self) -> bool:
        return self._next_page is not None

    async def next_page(self) -> "Result[HttpPage[T]]":
        if self._next_page is None:
            return Failure("no next page")
        return await self._backend._page(self._path, self._params, self._schema, self._next_page)


class HttpChatBackend:
    """Chat backend speaking JSON over HTTP with a bearer token.

    Blocking ``requests`` calls run in a worker thread so the event loop keeps
    serving other components. Live chat sessions poll the channel for messages
    newer than the last one delivered.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        poll_interval: float = 2.0,
        page_size: int = 25,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.page_size = page_size
        self.events = EventChannel()
        self._http = http or requests.Session()
        self._token: Optional[str] = None
        self._online = False
        self._polls: Dict[asyncio.Task, ChatSession] = {}

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._http.request(
            method, f"{self.base_url}{path}", headers=self._headers(), timeout=self.timeout, **kwargs
        )
        resp.raise_for_status()
        if not resp.content:
            return None
        return resp.json()

    async def _call(self, parse: Callable[[Any], T], method: str, path: str, **kwargs: Any) -> Result[T]:
        try:
            data = await asyncio.to_thread(self._request, method, path, **kwargs)
            return Success(parse(data))
        except (requests.RequestException, ValidationError, ValueError) as exc:
            logger.debug("REQUEST_FAIL method=%s path=%s error=%s", method, path, exc)
            return Failure(f"{method} {path} failed: {exc}", exc)

    async def _page(
        self, path: str, params: Dict[str, Any], schema: Type[BaseModel], page: int = 1
    ) -> "Result[HttpPage[Any]]":
        def parse(data: Any) -> HttpPage[Any]:
            parsed = schema.model_validate(data)
            items = [item.to_model() for item in parsed.items]
            return HttpPage(self, path, params, schema, items, parsed.next_page)

        query = {**params, "page": page, "size": self.page_size}
        return await self._call(parse, "GET", path, params=query)

    async def start_session(self, username: str) -> Result[User]:
        body = schemas.SessionRequest(username=username).model_dump()
        result = await self._call(schemas.SessionResponse.model_validate, "POST", "/sessions", json=body)
        if isinstance(result, Failure):
            return result
        self._token = result.value.token
        user = result.value.user.to_model()
        self.events.emit(CurrentUserChanged(user))
        self._set_online(True)
        return Success(user)

    async def end_session(self) -> Result[None]:
        result = await self._call(lambda _: None, "DELETE", "/sessions")
        if isinstance(result, Failure):
            return result
        self._cancel_polls()
        self._token = None
        self._set_online(False)
        self.events.emit(CurrentUserChanged(None))
        return result

    async def get_users(self) -> Result[HttpPage[User]]:
        return await self._page("/users", {}, schemas.UserPage)

    async def get_channels(self, joined: bool = True) -> Result[HttpPage[Channel]]:
        return await self._page("/channels", {"joined": str(joined).lower()}, schemas.ChannelPage)

    async def get_messages(self, channel: Channel) -> Result[HttpPage[Message]]:
        return await self._page(f"/channels/{channel.id}/messages", {}, schemas.MessagePage)

    async def get_unread_messages_count(self, channel: Channel) -> Result[int]:
        return await self._call(
            lambda data: schemas.CountOut.model_validate(data).count, "GET", f"/channels/{channel.id}/unread_count"
        )

    async def send_keystrokes(self, channel: Channel, keys: str) -> Result[None]:
        body = schemas.KeystrokesRequest(keys=keys).model_dump()
        return await self._call(lambda _: None, "POST", f"/channels/{channel.id}/keystrokes", json=body)

    async def send_message(self, channel: Channel, body: str) -> Result[Message]:
        payload = schemas.MessageCreate(body=body).model_dump()
        return await self._call(
            lambda data: schemas.MessageOut.model_validate(data).to_model(),
            "POST",
            f"/channels/{channel.id}/messages",
            json=payload,
        )

    def start_chat_session(self, channel: Channel, on_received_message: MessageHandler) -> Result[ChatSession]:
        if not self._token:
            return Failure("no active session")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            return Failure("no running event loop", exc)
        session = ChatSession(channel=channel, on_received_message=on_received_message)
        task = loop.create_task(self._poll(session))
        self._polls[task] = session
        task.add_done_callback(self._forget_poll)
        session.on_end = task.cancel
        return Success(session)

    def close(self) -> None:
        self._cancel_polls()
        self._http.close()

    async def _poll(self, session: ChatSession) -> None:
        path = f"/channels/{session.channel.id}/messages"
        after_id: Optional[int] = None
        first = True
        while session.active:
            if not first:
                await asyncio.sleep(self.poll_interval)
            first = False
            if after_id is None:
                # History pages are newest first; live delivery starts after the newest one.
                latest = await self._call(
                    schemas.MessagePage.model_validate, "GET", path, params={"page": 1, "size": 1}
                )
                if isinstance(latest, Failure):
                    self._poll_failed(latest)
                    continue
                self._set_online(True)
                after_id = latest.value.items[0].id if latest.value.items else 0
                continue
            result = await self._call(
                schemas.MessagePage.model_validate, "GET", path, params={"after_message_id": after_id}
            )
            if isinstance(result, Failure):
                self._poll_failed(result)
                continue
            self._set_online(True)
            for item in result.value.items:
                if not session.active:
                    break
                after_id = item.id
                try:
                    session.on_received_message(item.to_model())
                except Exception:  # noqa: BLE001
                    logger.exception("MESSAGE_HANDLER_FAIL channel_id=%s message_id=%s", session.channel.id, item.id)

    def _poll_failed(self, result: Failure) -> None:
        if isinstance(result.error, requests.ConnectionError):
            self._set_online(False)

    def _forget_poll(self, task: asyncio.Task) -> None:
        session = self._polls.pop(task, None)
        if session is not None:
            session.active = False

    def _set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        self.events.emit(CurrentUserOnline() if online else CurrentUserOffline())

    def _cancel_polls(self) -> None:
        # Ending a session cancels its poll task through ``on_end``.
        for session in list(self._polls.values()):
            session.end()
