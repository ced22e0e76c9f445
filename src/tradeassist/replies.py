from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .llm import TextGenerator

logger = logging.getLogger(__name__)

FLAVOUR_SYSTEM_PROMPT: Final[str] = (
    "You are the cheeky TradeAssist SMS bot for Australian tradies. "
    "The user will tell you their trade. Guess their favourite Up & Go drink "
    "flavour based on that trade and reply in one or two short, friendly "
    "sentences of Aussie slang. Plain text only, no emojis or markdown."
)

FALLBACK_REPLY: Final[str] = "Sorry, I'm having trouble responding right now. Try again shortly."


@dataclass(frozen=True)
class TradeFlavour:
    flavour: str
    replies: tuple[str, ...]


def _entry(flavour: str, *templates: str) -> TradeFlavour:
    return TradeFlavour(flavour, tuple(t.format(flavour=flavour) for t in templates))


# Keyword -> canned replies. Read-only after import.
TRADE_FLAVOURS: Final = MappingProxyType(
    {
        "sparky": _entry(
            "chocolate",
            "A sparky? Easy, you're a {flavour} Up & Go legend. Dark and full of energy, like a live wire.",
            "Sparkies run on {flavour}. Don't touch the wrong terminal before smoko!",
        ),
        "electrician": _entry(
            "chocolate",
            "Electricians are always {flavour}. Rich, reliable and switched on.",
        ),
        "plumber": _entry(
            "vanilla",
            "Plumbers go {flavour} every time. Smooth flow, no blockages.",
        ),
        "carpenter": _entry(
            "banana",
            "A chippie? That's a {flavour} Up & Go for sure. Measure twice, sip once.",
        ),
        "builder": _entry(
            "strawberry",
            "Builders are {flavour} people. Solid foundations start with brekkie.",
        ),
        "painter": _entry(
            "strawberry",
            "Painters love {flavour}. Gotta match the colour palette, mate.",
        ),
    }
)


class ReplyResolver:
    """
    Turns an inbound SMS into a reply.

    Known trades get a canned line (always the first variant, so replies
    are reproducible). Everything else goes to the text generator once;
    any failure there becomes FALLBACK_REPLY.
    """

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    def lookup(self, text: str) -> TradeFlavour | None:
        return TRADE_FLAVOURS.get(text.strip().lower())

    def resolve(self, incoming_text: str) -> str:
        entry = self.lookup(incoming_text)
        if entry is not None:
            return entry.replies[0]

        try:
            reply = self.generator.generate(FLAVOUR_SYSTEM_PROMPT, incoming_text)
        except Exception as exc:
            logger.error("OpenAI error: %s", exc)
            return FALLBACK_REPLY

        if not reply or not reply.strip():
            logger.warning("Empty completion for %r, using fallback", incoming_text)
            return FALLBACK_REPLY
        return reply.strip()
