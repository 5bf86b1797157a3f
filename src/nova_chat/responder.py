"""Rule-based responder: maps a conversation to one canned reply."""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .typing import Message

logger = logging.getLogger(__name__)

Handler = Callable[[str, Sequence[Message]], str]


# -----------------------------
# Types & constants
# -----------------------------
@dataclass(frozen=True)
class Rule:
    """A pattern/handler pair for one category of canned reply."""
    name: str
    pattern: re.Pattern[str]
    handler: Handler

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


READY_REPLY = "I'm ready when you are!"
DEFAULT_TOPIC = "something new"
SUMMARY_LIMIT = 120
ELLIPSIS = "..."

FOLLOW_UPS: Tuple[str, ...] = (
    "Anything else you'd like to explore?",
    "Want to dive deeper or switch topics?",
    "Curious about another angle? I'm game.",
)

_TOPIC_RE = re.compile(r"about ([a-z\s]+)", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


# -----------------------------
# Handlers
# -----------------------------
def _plan_reply(text: str, history: Sequence[Message]) -> str:
    return "\n".join([
        "Here's a lightweight plan you can adapt:",
        "1. Capture a quick list of everything on your mind.",
        "2. Rank the list by urgency/energy required.",
        "3. Block focused time for the hardest thing while you're most alert.",
        "4. Batch similar tasks so you don't mode-switch all day.",
        "5. Keep a 5-minute buffer between commitments to reset.",
        "Wrap up by reviewing what worked and what to adjust tomorrow.",
    ])


def _recipe_reply(text: str, history: Sequence[Message]) -> str:
    return "\n".join([
        "Try this 20-minute skillet pasta:",
        "• Sauté garlic and cherry tomatoes in olive oil until blistered.",
        "• Toss in spinach, a pinch of chili flakes, and cooked pasta.",
        "• Finish with lemon zest, parmesan, and a drizzle of the tomato juices.",
        "Bonus: swap spinach for kale or add chickpeas for protein.",
    ])


def _focus_reply(text: str, history: Sequence[Message]) -> str:
    return "\n".join([
        "Quick focus reset:",
        "• Pick a single target outcome for the next 25 minutes.",
        "• Clear the desk, mute notifications, and lower screen brightness a touch.",
        "• Start with a 3-minute warmup task to build momentum.",
        "• End the sprint by writing the very next action so restarting is easy.",
    ])


def extract_topic(text: str) -> str:
    """Return the phrase after "about" (letters and spaces only), or a placeholder."""
    m = _TOPIC_RE.search(text)
    topic = m.group(1).strip() if m else ""
    return topic or DEFAULT_TOPIC


def _learn_reply(text: str, history: Sequence[Message]) -> str:
    topic = extract_topic(text)
    return (
        f"In two bites on {topic}:\n"
        "• Start with the big picture so your brain sees how pieces connect.\n"
        "• Anchor it to something you already know, then teach it back in your own words."
    )


def _greeting_reply(text: str, history: Sequence[Message]) -> str:
    return (
        "Hey there! What's on your mind today? I can help with planning, ideas, "
        "or just friendly brainstorming."
    )


def _rule(name: str, pattern: str, handler: Handler) -> Rule:
    return Rule(name=name, pattern=re.compile(pattern, re.IGNORECASE), handler=handler)


# Priority order: first match wins. Keywords must start a word ("explain" is
# not a plan, "this" is not a greeting) but may be a prefix ("planning").
DEFAULT_RULES: Tuple[Rule, ...] = (
    _rule("planning", r"\b(plan|schedule|organize)", _plan_reply),
    _rule("recipe", r"\b(recipe|cook|dinner|meal)", _recipe_reply),
    _rule("focus", r"\b(productivity|focus|motivation|procrastinate)", _focus_reply),
    _rule("learning", r"\b(learn|teach|explain)", _learn_reply),
    _rule("greeting", r"\b(hello|hi|hey|good (morning|afternoon|evening))", _greeting_reply),
)


# -----------------------------
# Formatting helpers
# -----------------------------
def summarize(text: str, limit: int = SUMMARY_LIMIT) -> str:
    """Collapse whitespace and cap the result at ``limit`` characters."""
    sanitized = _WS_RE.sub(" ", text).strip()
    if len(sanitized) <= limit:
        return sanitized
    return sanitized[: limit - len(ELLIPSIS)] + ELLIPSIS


def format_history(history: Sequence[Message]) -> str:
    return "\n".join(f"{m['role'].upper()}: {m['content']}" for m in history)


def last_user_message(history: Sequence[Message]) -> Optional[Message]:
    for message in reversed(history):
        if message.get("role") == "user":
            return message
    return None


# -----------------------------
# Responder
# -----------------------------
class Responder:
    """Stateless reply generator over an ordered, read-only rule table.

    Parameters
    ----------
    rules : Sequence[Rule]
        Rules in priority order. Stored as a tuple; never mutated.
    rng : random.Random | None
        Source for the fallback follow-up line. Pass a seeded instance for
        reproducible output.
    """

    def __init__(
        self,
        rules: Sequence[Rule] = DEFAULT_RULES,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rules: Tuple[Rule, ...] = tuple(rules)
        self._rng = rng or random.Random()

    @property
    def rule_names(self) -> List[str]:
        return [r.name for r in self.rules]

    def match(self, text: str) -> Optional[Rule]:
        """Return the first rule whose pattern occurs in ``text``."""
        for rule in self.rules:
            if rule.matches(text):
                return rule
        return None

    def fallback(self, text: str) -> str:
        return "\n".join([
            "Here's what I'm picking up:",
            f"• {summarize(text)}",
            "• I can break it down, offer ideas, or map next steps. Just point me where to help.",
            self._rng.choice(FOLLOW_UPS),
        ])

    def reply(self, history: Sequence[Message]) -> str:
        """Return the single reply for ``history`` (which is left untouched)."""
        last = last_user_message(history)
        if last is None:
            logger.debug("No user message in %d message(s); sending ready reply.", len(history))
            return READY_REPLY

        text = last["content"]
        rule = self.match(text)
        if rule is None:
            logger.debug("No rule matched; using fallback.")
            return self.fallback(text)

        logger.debug("Matched rule %r.", rule.name)
        return rule.handler(text, history)


_default_responder = Responder()


def generate_response(
    history: Sequence[Message],
    rules: Optional[Sequence[Rule]] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Convenience wrapper: reply with the default rules and an unseeded RNG."""
    if rules is None and rng is None:
        return _default_responder.reply(history)
    return Responder(rules if rules is not None else DEFAULT_RULES, rng).reply(history)
