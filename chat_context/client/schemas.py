"""Pydantic schemas for chat server request and response bodies."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import Channel, ChannelType, Message, User


class UserOut(BaseModel):
    id: int
    name: str
    display_name: str
    display_picture_url: Optional[str] = None

    def to_model(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            display_name=self.display_name,
            display_picture_url=self.display_picture_url,
        )


class ChannelOut(BaseModel):
    id: int
    type: ChannelType
    name: str = ""
    members: List[UserOut] = Field(default_factory=list)

    def to_model(self) -> Channel:
        return Channel(
            id=self.id,
            type=self.type,
            name=self.name,
            members=tuple(member.to_model() for member in self.members),
        )


class MessageOut(BaseModel):
    id: int
    channel_id: int
    body: str
    user: Optional[UserOut] = None
    created_at: Optional[datetime] = None

    def to_model(self) -> Message:
        return Message(
            id=self.id,
            channel_id=self.channel_id,
            body=self.body,
            user=self.user.to_model() if self.user else None,
            created_at=self.created_at,
        )


class SessionRequest(BaseModel):
    username: str


class SessionResponse(BaseModel):
    token: str
    user: UserOut


class UserPage(BaseModel):
    items: List[UserOut]
    next_page: Optional[int] = Field(None, description="Number of the following page, if any")


class ChannelPage(BaseModel):
    items: List[ChannelOut]
    next_page: Optional[int] = None


class MessagePage(BaseModel):
    items: List[MessageOut]
    next_page: Optional[int] = None


class CountOut(BaseModel):
    count: int


class KeystrokesRequest(BaseModel):
    keys: str


class MessageCreate(BaseModel):
    body: str
