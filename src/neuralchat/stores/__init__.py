from neuralchat.stores.chat_list import ChatListStore
from neuralchat.stores.timeline import MessageTimelineStore

__all__ = ["ChatListStore", "MessageTimelineStore"]
