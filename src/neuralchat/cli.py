from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys

from dotenv import load_dotenv

from neuralchat.client import ChatClient
from neuralchat.config import MODEL_KEYS, ClientConfig, ConfigError
from neuralchat.formatting import format_date
from neuralchat.gateway import GatewayError
from neuralchat.probe import AuthState
from neuralchat.runtime.repl import ChatREPL, render_message
from neuralchat.state import LoadState


def main() -> int:
    load_dotenv()
    return _main(sys.argv[1:])


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neuralchat", description="NeuralChat - terminal chat client")
    parser.add_argument("--model", default=None, choices=MODEL_KEYS, help="Model for outgoing messages")
    parser.add_argument("--base-url", default=None, help="Chat server URL (default: $NEURALCHAT_BASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", required=False)

    repl = subparsers.add_parser("repl", help="Start an interactive chat session")
    repl.add_argument("--message", "-m", help="Send this prompt first")

    subparsers.add_parser("chats", help="List chats")

    send = subparsers.add_parser("send", help="Send a single message")
    send.add_argument("--message", "-m", required=True)
    send.add_argument("--chat", default=None, help="Existing chat id (default: start a new chat)")

    delete = subparsers.add_parser("delete", help="Delete a chat")
    delete.add_argument("chat_id")

    login = subparsers.add_parser("login", help="Sign in with email and password, then chat")
    login.add_argument("email")
    login.add_argument("--password", default=None, help="Account password (default: prompt)")
    login.add_argument("--name", default="", help="User name sent along with the sign-in")
    login.add_argument("--message", "-m", help="Send this prompt first")

    register = subparsers.add_parser("register", help="Create an account, sign in, then chat")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("--password", default=None, help="Account password (default: prompt)")
    register.add_argument("--message", "-m", help="Send this prompt first")

    subparsers.add_parser("logout", help="End the server-side session")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = ClientConfig.from_env(model=args.model, base_url=args.base_url)
        config.validate()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    command = args.command or "repl"
    handlers = {
        "repl": _cmd_repl,
        "chats": _cmd_chats,
        "send": _cmd_send,
        "delete": _cmd_delete,
        "logout": _cmd_logout,
        "login": _cmd_repl,
        "register": _cmd_repl,
    }
    return asyncio.run(_run(handlers[command], config, args))


async def _run(handler, config: ClientConfig, args) -> int:
    client = ChatClient(config)
    try:
        if args.command in ("login", "register"):
            state = await _sign_in(client, config, args)
        else:
            state = await client.start()
            if state is not AuthState.AUTHENTICATED:
                state = await _sign_in(client, config, args)
        if state is not AuthState.AUTHENTICATED:
            print(
                f"Error: not signed in to {config.base_url}. Run `neuralchat login EMAIL` "
                "or set NEURALCHAT_EMAIL and NEURALCHAT_PASSWORD.",
                file=sys.stderr,
            )
            return 1
        return await handler(client, args)
    finally:
        await client.aclose()


async def _sign_in(client: ChatClient, config: ClientConfig, args) -> AuthState:
    email = getattr(args, "email", None) or config.email
    if not email and args.command in (None, "repl") and sys.stdin.isatty():
        email = input("Email: ").strip()
    if not email:
        return client.auth_state

    password = getattr(args, "password", None) or config.password
    if not password:
        password = getpass.getpass(f"Password for {email}: ")
    name = getattr(args, "name", "") or ""
    try:
        if args.command == "register":
            await client.register(name, email, password)
            print(f"Registered {email}")
        return await client.login(email, password, name)
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return AuthState.UNAUTHENTICATED


async def _cmd_repl(client: ChatClient, args) -> int:
    await ChatREPL(client).run(initial_message=getattr(args, "message", None))
    return 0


async def _cmd_chats(client: ChatClient, args) -> int:
    if client.chat_list.load_state is LoadState.FAILED:
        print("Error: could not load chats", file=sys.stderr)
        return 1
    for chat in client.chat_list.chats:
        print(f"{chat.id}\t{format_date(chat.created_at)}\t{chat.title}")
    return 0


async def _cmd_send(client: ChatClient, args) -> int:
    if args.chat:
        await client.select_chat(args.chat)
    if not await client.send(args.message):
        print("Error: message was not delivered", file=sys.stderr)
        return 1
    for line in render_message(client.timeline.messages[-1]):
        print(line)
    if args.chat is None:
        print(f"(chat id: {client.active.current})")
    return 0


async def _cmd_delete(client: ChatClient, args) -> int:
    if not await client.delete_chat(args.chat_id):
        print(f"Error: could not delete chat {args.chat_id}", file=sys.stderr)
        return 1
    print(f"Deleted {args.chat_id}")
    return 0


async def _cmd_logout(client: ChatClient, args) -> int:
    await client.logout()
    print("Logged out")
    return 0
