"""Terminal front end for a running Nova chat server."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List

import httpx

SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from nova_chat.config import load_config  # noqa: E402
from nova_chat.session import STARTER_PROMPTS, ChatSession  # noqa: E402
from nova_chat.typing import Message  # noqa: E402

EXIT_WORDS = {"/quit", "/exit"}


class _Printer:
    """Prints assistant messages appended since the last call (user input is already on screen)."""

    def __init__(self) -> None:
        self.shown = 0

    def __call__(self, messages: List[Message]) -> None:
        for m in messages[self.shown:]:
            if m["role"] == "assistant":
                print(f"\nBot:\n{m['content']}\n")
        self.shown = len(messages)


def main() -> None:
    cfg = load_config(os.environ.get("NOVA_CHAT_CONFIG"))
    client_cfg = cfg.get("client", {})

    parser = argparse.ArgumentParser(description="Chat with the Nova server from a terminal.")
    parser.add_argument("--url", default=client_cfg.get("base_url", "http://127.0.0.1:8000"))
    parser.add_argument("--endpoint", default=client_cfg.get("endpoint", "/api/chat"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    with httpx.Client(base_url=args.url) as client:
        session = ChatSession(client, endpoint=args.endpoint)
        printer = _Printer()
        session.subscribe(printer)
        printer(session.messages)

        print("Try asking:")
        for prompt in STARTER_PROMPTS:
            print(f"  - {prompt}")
        print("Type /quit to exit.\n")

        while True:
            try:
                text = input("You: ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if text.strip().lower() in EXIT_WORDS:
                break
            if not session.can_send(text):
                continue
            print("Thinking...")
            session.send(text)


if __name__ == "__main__":
    main()
