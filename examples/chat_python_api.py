#!/usr/bin/env python3
"""
NeuralChat - Python API Examples

This shows how to drive the chat client programmatically instead of via CLI.
Useful for scripting conversations or wiring the client into another UI.
"""

import asyncio

from dotenv import load_dotenv

from common.events import ErrorEvent, SendStateChangedEvent, TimelineChangedEvent
from neuralchat.client import ChatClient
from neuralchat.config import ClientConfig
from neuralchat.probe import AuthState


def on_event(event) -> None:
    if isinstance(event, SendStateChangedEvent):
        print(f"[send] {event.state}")
    elif isinstance(event, TimelineChangedEvent):
        print(f"[timeline] {event.reason}: {event.count} message(s)")
    elif isinstance(event, ErrorEvent):
        print(f"[error:{event.source}] {event.message}")


async def example_new_conversation(client: ChatClient) -> str | None:
    """Example 1: Start a chat and continue it"""
    print("=== Example 1: New Conversation ===\n")

    await client.new_chat()
    if not await client.send("Explain quantum entanglement in two sentences"):
        return None
    print(f"\nChat created: {client.active.current} ({client.active_title})")

    client.models.select("llama3fast")
    await client.send("Now explain it to a five year old")

    for record in client.timeline.messages:
        print(f"\nyou: {record.prompt}")
        print(f"{record.model}: {record.response}")
    return client.active.current


async def example_list_and_delete(client: ChatClient, chat_id: str) -> None:
    """Example 2: List chats and delete one"""
    print("\n=== Example 2: List and Delete ===\n")

    await client.chat_list.load()
    for chat in client.chat_list.chats:
        print(f"  • {chat.id} - {chat.title}")

    if await client.delete_chat(chat_id):
        print(f"\n✅ Deleted {chat_id}")


async def main() -> None:
    load_dotenv()
    client = ChatClient(ClientConfig(), on_event=on_event)
    try:
        if await client.start() is not AuthState.AUTHENTICATED:
            print("❌ Not signed in. Set NEURALCHAT_TOKEN")
            return
        chat_id = await example_new_conversation(client)
        if chat_id:
            await example_list_and_delete(client, chat_id)
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
