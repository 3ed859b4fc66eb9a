import asyncio

from neuralchat.client import ChatClient
from neuralchat.formatting import format_time
from neuralchat.models import MessageRecord
from neuralchat.runtime.builtins import BuiltinCommands
from neuralchat.runtime.router import InputRouter, RouteKind


def render_message(record: MessageRecord) -> list[str]:
    stamp = f" [{format_time(record.created_at)}]" if record.created_at else ""
    lines = [f"you{stamp}: {record.prompt}"]
    if record.response is not None:
        lines.append(f"{record.model}{stamp}: {record.response}")
    elif record.is_pending:
        lines.append("… thinking")
    return lines


class ChatREPL:
    def __init__(self, client: ChatClient, out=print):
        self.client = client
        self.out = out
        self.builtins = BuiltinCommands(client, out=out)
        self.router = InputRouter(self.builtins)

    def show_timeline(self) -> None:
        self.out(f"\n── {self.client.active_title} ──")
        for record in self.client.timeline.messages:
            for line in render_message(record):
                self.out(line)

    async def process_user_message(self, text: str) -> None:
        before = len(self.client.timeline.messages)
        sent = await self.client.send(text)
        if not sent:
            if text.strip():
                self.out("❌ Message was not delivered, please resend")
            return
        for record in self.client.timeline.messages[before:]:
            if record.response is not None:
                self.out(f"{record.model}: {record.response}")

    async def run(self, initial_message: str | None = None) -> None:
        self.out(f"🤖 NeuralChat (model: {self.client.models.current})")
        self.out("Commands: /help for all commands")
        await self.builtins.cmd_chats("")

        if initial_message:
            await self.process_user_message(initial_message)

        while True:
            try:
                user_input = (await asyncio.to_thread(input, "\n> ")).strip()
            except (KeyboardInterrupt, EOFError):
                self.out("\n\n⚠️  Interrupted")
                break

            if not user_input:
                continue

            route = self.router.route(user_input)
            if route.kind is RouteKind.COMMAND:
                if not await self.builtins.handle(route.command, route.text):
                    break
                if route.command in ("open", "new"):
                    self.show_timeline()
                continue
            if route.kind is RouteKind.UNKNOWN:
                self.out(f"Unknown command: /{route.command}. Type /help for available commands.")
                continue

            await self.process_user_message(route.text)
