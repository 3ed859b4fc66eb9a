from neuralchat.client import ChatClient
from neuralchat.config import MODELS
from neuralchat.formatting import format_date
from neuralchat.state import LoadState


class BuiltinCommands:
    def __init__(self, client: ChatClient, out=print):
        self.client = client
        self.out = out
        self._handlers = {
            "quit": self.cmd_quit,
            "help": self.cmd_help,
            "chats": self.cmd_chats,
            "open": self.cmd_open,
            "new": self.cmd_new,
            "delete": self.cmd_delete,
            "model": self.cmd_model,
            "models": self.cmd_models,
            "logout": self.cmd_logout,
        }

    def list_commands(self) -> list[str]:
        return sorted(self._handlers.keys())

    def has_command(self, name: str) -> bool:
        return name in self._handlers

    async def handle(self, name: str, args: str) -> bool:
        handler = self._handlers.get(name)
        if not handler:
            return True
        return await handler(args.strip())

    def resolve_chat(self, ref: str) -> str | None:
        """Accept either a 1-based position in the chat list or a chat id."""
        chats = self.client.chat_list.chats
        if ref.isdigit() and 1 <= int(ref) <= len(chats):
            return chats[int(ref) - 1].id
        if self.client.chat_list.get(ref) is not None:
            return ref
        return None

    async def cmd_quit(self, args: str) -> bool:
        self.out("👋 Goodbye!")
        return False

    async def cmd_chats(self, args: str) -> bool:
        chats = self.client.chat_list.chats
        if not chats:
            if self.client.chat_list.load_state is LoadState.FAILED:
                self.out("❌ Could not load chats")
            else:
                self.out("No chats yet. Start a new conversation.")
            return True
        self.out("Recent:")
        for idx, chat in enumerate(chats, start=1):
            marker = "*" if chat.id == self.client.active.current else " "
            self.out(f" {marker}{idx:>3}. {chat.title}  ({format_date(chat.created_at)})")
        return True

    async def cmd_open(self, args: str) -> bool:
        if not args:
            self.out("Usage: /open <number|id>")
            return True
        chat_id = self.resolve_chat(args)
        if chat_id is None:
            self.out(f"❌ Chat {args} not found")
            return True
        await self.client.select_chat(chat_id)
        self.out(f"✅ Opened: {self.client.active_title}")
        return True

    async def cmd_new(self, args: str) -> bool:
        await self.client.new_chat()
        self.out("✅ New conversation")
        return True

    async def cmd_delete(self, args: str) -> bool:
        if not args:
            self.out("Usage: /delete <number|id>")
            return True
        chat_id = self.resolve_chat(args)
        if chat_id is None:
            self.out(f"❌ Chat {args} not found")
            return True
        if await self.client.delete_chat(chat_id):
            self.out("✅ Chat deleted")
        return True

    async def cmd_model(self, args: str) -> bool:
        if not args:
            self.out(f"Current model: {self.client.models.current}")
            return True
        try:
            self.client.models.select(args)
        except ValueError as e:
            self.out(f"❌ {e}")
            return True
        self.out(f"✅ Switched to model: {args}")
        return True

    async def cmd_models(self, args: str) -> bool:
        for info in MODELS:
            marker = "*" if info.key == self.client.models.current else " "
            self.out(f" {marker} {info.key:<12} {info.label} ({info.sub})")
        return True

    async def cmd_logout(self, args: str) -> bool:
        await self.client.logout()
        self.out("👋 Logged out")
        return False

    async def cmd_help(self, args: str) -> bool:
        self.out("\nCommands:")
        for name in self.list_commands():
            self.out(f"  /{name}")
        self.out("")
        return True
