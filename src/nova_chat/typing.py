from __future__ import annotations
from typing import TypedDict, NotRequired


class Message(TypedDict):
    """A single chat message as exchanged between client and server."""

    role: str            # "user" | "assistant" | "system"
    content: str         # message text

    # Client-side display key, ignored by the server
    id: NotRequired[str]
