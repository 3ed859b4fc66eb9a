import asyncio

import pytest

from common.events import ChatListChangedEvent, EventEmitter
from conftest import settle
from neuralchat.models import ChatSummary
from neuralchat.state import LoadState
from neuralchat.stores.chat_list import ChatListStore


@pytest.fixture
def store(gateway, events) -> ChatListStore:
    return ChatListStore(gateway, EventEmitter(events.append))


class TestLoad:
    @pytest.mark.asyncio
    async def test_load_replaces_list(self, gateway, store):
        gateway.add_chat("a", "first")
        gateway.add_chat("b", "second")
        store.chats = [ChatSummary(id="stale", title="gone")]

        await store.load()

        assert [c.id for c in store.chats] == ["b", "a"]
        assert store.load_state is LoadState.LOADED

    @pytest.mark.asyncio
    async def test_load_failure_empties_list_without_raising(self, gateway, store):
        store.chats = [ChatSummary(id="stale", title="gone")]
        gateway.fail.add("list_chats")

        await store.load()

        assert store.chats == []
        assert store.load_state is LoadState.FAILED

    @pytest.mark.asyncio
    async def test_empty_account_is_loaded_not_failed(self, store):
        await store.load()

        assert store.chats == []
        assert store.load_state is LoadState.LOADED

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_dropped(self, gateway, store):
        gateway.add_chat("a", "first")
        gateway.chats.append(ChatSummary(id="a", title="duplicate"))

        await store.load()

        assert [(c.id, c.title) for c in store.chats] == [("a", "first")]


class TestPrepend:
    @pytest.mark.parametrize("size", [0, 1, 7])
    def test_new_chat_is_always_first(self, store, size):
        store.chats = [ChatSummary(id=f"c{i}", title=f"chat {i}") for i in range(size)]

        store.prepend_local(ChatSummary(id="new", title="new chat"))

        assert store.chats[0].id == "new"
        assert len(store.chats) == size + 1

    def test_prepend_keeps_ids_unique(self, store):
        store.chats = [ChatSummary(id="a", title="a"), ChatSummary(id="b", title="b")]

        store.prepend_local(ChatSummary(id="b", title="b again"))

        assert [c.id for c in store.chats] == ["b", "a"]
        assert store.chats[0].title == "b again"


class TestRemove:
    @pytest.mark.asyncio
    async def test_remove_after_confirmation(self, gateway, store, events):
        gateway.add_chat("a", "first")
        gateway.add_chat("b", "second")
        await store.load()

        assert await store.remove_local("a") is True

        assert [c.id for c in store.chats] == ["b"]
        assert events[-1] == ChatListChangedEvent(count=1, reason="remove")

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_entry(self, gateway, store):
        gateway.add_chat("a", "first")
        await store.load()
        before = list(store.chats)
        gateway.fail.add("delete_chat")

        assert await store.remove_local("a") is False

        assert store.chats == before
        assert store.deleting == set()

    @pytest.mark.asyncio
    async def test_entry_stays_until_delete_confirms(self, gateway, store):
        gateway.add_chat("a", "first")
        await store.load()
        gate = asyncio.Event()
        gateway.gates["delete_chat:a"] = gate

        task = asyncio.create_task(store.remove_local("a"))
        await settle()
        assert [c.id for c in store.chats] == ["a"]
        assert store.deleting == {"a"}

        gate.set()
        await task
        assert store.chats == []
        assert store.deleting == set()

    @pytest.mark.asyncio
    async def test_overlapping_deletes_track_each_chat(self, gateway, store):
        gateway.add_chat("a", "first")
        gateway.add_chat("b", "second")
        await store.load()
        gate_a = asyncio.Event()
        gate_b = asyncio.Event()
        gateway.gates["delete_chat:a"] = gate_a
        gateway.gates["delete_chat:b"] = gate_b

        delete_a = asyncio.create_task(store.remove_local("a"))
        delete_b = asyncio.create_task(store.remove_local("b"))
        await settle()
        assert store.deleting == {"a", "b"}

        gate_a.set()
        assert await delete_a is True
        assert store.deleting == {"b"}
        assert [c.id for c in store.chats] == ["b"]

        gate_b.set()
        assert await delete_b is True
        assert store.deleting == set()
        assert store.chats == []
