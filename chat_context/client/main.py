"""Console client for the chat application."""
import asyncio
import sys
from typing import List, Optional

from ..shared.result import Failure
from .app import ChatAppContext
from .config import get_settings
from .models import Channel, Message, TextMessageDraft


async def ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip()


class ConsoleClient:
    """Interactive console front end driving a :class:`ChatAppContext`."""

    def __init__(self, context: ChatAppContext):
        self.context = context
        self.channels: List[Channel] = []

    async def login(self) -> bool:
        print("=== Login ===")
        username = await ask("Username: ")
        result = await self.context.login(username)
        if isinstance(result, Failure):
            print(f"Login failed: {result.reason}")
            return False
        print(f"Welcome, {result.value.display_name}!")
        return True

    async def list_channels(self) -> None:
        cursor = self.context.joined_channels()
        await cursor.fetch_next()
        while True:
            if cursor.failure:
                print(f"Could not fetch channels: {cursor.failure.reason}")
            self.channels = list(cursor)
            for index, channel in enumerate(self.channels, start=1):
                unread = await self.context.channel_unread_messages_count(channel)
                badge = f" ({unread} unread)" if unread else ""
                print(f"{index}. {self.context.channel_display_name(channel)}{badge}")
            if cursor.exhausted or (await ask("[m]ore or Enter: ")).lower() != "m":
                return
            await cursor.fetch_next()

    async def open_chat(self) -> None:
        if not self.channels:
            await self.list_channels()
        choice = await ask("Channel number: ")
        channel = self._channel_at(choice)
        if channel is None:
            print("Channel not found.")
            return
        self.context.show_channel(channel)
        await self._print_history(channel)
        if self.context.start_chat_session(channel, self._print_message) is None:
            print("Live updates unavailable for this channel.")
        while True:
            print("\nChat commands: [s]end, [d]iscard, [b]ack")
            cmd = (await ask("> ")).lower()
            if cmd == "b":
                self.context.chat.end()
                self.context.show_menu()
                break
            if cmd == "s":
                text = await ask("Message: ")
                await self.context.update_message_draft(TextMessageDraft(text))
                result = await self.context.send_message_draft(self.context.message_draft)
                if isinstance(result, Failure):
                    print(f"Failed to send message: {result.reason}")
            if cmd == "d":
                self.context.discard_message_draft()

    async def logout(self) -> None:
        await self.context.logout()
        print("Logged out.")

    async def _print_history(self, channel: Channel) -> None:
        cursor = self.context.channel_messages(channel)
        await cursor.fetch_next()
        for message in reversed(cursor.items):
            self._print_message(message)
        if not cursor.items:
            print("No messages yet.")

    def _print_message(self, message: Message) -> None:
        current = self.context.current_user
        if message.user is None:
            sender = "system"
        elif current is not None and message.user.id == current.id:
            sender = "(you)"
        else:
            sender = message.user.display_name
        timestamp = message.created_at.strftime("%H:%M") if message.created_at else "--:--"
        print(f"[{timestamp}] {sender}: {message.body}")

    def _channel_at(self, choice: str) -> Optional[Channel]:
        if not choice.isdigit():
            return None
        index = int(choice) - 1
        if 0 <= index < len(self.channels):
            return self.channels[index]
        return None


async def run() -> None:
    print("Chat Client")
    settings = get_settings()
    if not settings.server_url:
        settings.server_url = (await ask("Server URL (e.g. http://127.0.0.1:8000): ")).rstrip("/")
    async with ChatAppContext.from_settings(settings) as context:
        client = ConsoleClient(context)
        while True:
            print("\nMenu: [l]ogin, [q]uit")
            choice = (await ask("> ")).lower()
            if choice == "q":
                return
            if choice == "l" and await client.login():
                context.show_menu()
                while context.current_user is not None:
                    status = "online" if context.online else "offline"
                    print(f"\nUser menu ({status}): [c]hannels, [o]pen chat, [x] logout")
                    sub = (await ask("> ")).lower()
                    if sub == "x":
                        await client.logout()
                        break
                    if sub == "c":
                        await client.list_channels()
                    if sub == "o":
                        await client.open_chat()


def main() -> None:
    try:
        asyncio.run(run())
    except (KeyboardInterrupt, EOFError):
        sys.exit(0)


if __name__ == "__main__":
    main()
