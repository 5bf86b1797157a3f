"""Client-side conversation state for talking to the chat endpoint."""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

import httpx

from .typing import Message

logger = logging.getLogger(__name__)

Listener = Callable[[List[Message]], None]

GREETING = (
    "Hi! I'm your helpful chatbot. Ask me anything: ideas, explanations, "
    "or friendly chit-chat."
)
SNAG_TEMPLATE = "I hit a snag: {error}. Mind trying again?"
GENERIC_ERROR = "Something went wrong"

STARTER_PROMPTS = (
    "How can you help me plan my day?",
    "What's a quick dinner idea tonight?",
    "Give me a productivity tip.",
    "Teach me something new in 2 sentences.",
)


class ChatRequestError(Exception):
    """Raised when the chat endpoint answers with a non-success status."""


def _new_message(role: str, content: str) -> Message:
    return {"id": uuid.uuid4().hex, "role": role, "content": content}


class ChatSession:
    """One browsing session's message list with at most one request in flight.

    The user message is appended before the request goes out; exactly one
    assistant message (reply or apology) is appended when it settles.
    Listeners registered with :meth:`subscribe` see the list after every
    change, which is where a front end scrolls to the newest message.
    """

    def __init__(
        self,
        client: httpx.Client,
        endpoint: str = "/api/chat",
        greeting: Optional[str] = GREETING,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.messages: List[Message] = []
        self.pending = False
        self._listeners: List[Listener] = []
        if greeting:
            self.messages.append(_new_message("assistant", greeting))

    # ---------- observers ----------
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _append(self, message: Message) -> Message:
        self.messages.append(message)
        for listener in self._listeners:
            listener(self.messages)
        return message

    # ---------- sending ----------
    def can_send(self, text: str) -> bool:
        return bool(text.strip()) and not self.pending

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        self.pending = True
        try:
            yield
        finally:
            self.pending = False

    def _payload(self) -> Dict[str, List[Dict[str, str]]]:
        return {"messages": [{"role": m["role"], "content": m["content"]} for m in self.messages]}

    def _request_reply(self) -> str:
        response = self.client.post(self.endpoint, json=self._payload())
        if not response.is_success:
            raise ChatRequestError(f"Server responded with {response.status_code}")
        return str(response.json()["reply"])

    def send(self, text: str) -> Optional[Message]:
        """Send ``text`` and return the assistant message appended for it.

        Returns None without doing anything when :meth:`can_send` is false.
        Failures become an apology message; nothing is raised.
        """
        if not self.can_send(text):
            return None

        self._append(_new_message("user", text.strip()))
        with self._in_flight():
            try:
                reply = self._request_reply()
            except Exception as e:
                logger.warning("Chat request failed: %s", e)
                description = str(e) or GENERIC_ERROR
                return self._append(
                    _new_message("assistant", SNAG_TEMPLATE.format(error=description))
                )
            return self._append(_new_message("assistant", reply))
