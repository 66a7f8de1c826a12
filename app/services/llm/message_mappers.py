"""Conversion of chat messages into provider wire shapes.

Two placement policies exist for system messages:

- inline: every message is passed through in order, system messages included
  (OpenAI-compatible providers).
- extracted: system messages are removed from the turn list and the first one
  is hoisted into a separate instruction field (Anthropic, Google). Later
  system messages are dropped.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from app.models.chat.models import ChatMessage


@dataclass(frozen=True)
class ExtractedConversation:
    system: str | None
    turns: list[ChatMessage]


def build_inline_messages(messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    return [{"role": m.role, "content": m.content} for m in messages]


def extract_system(messages: Sequence[ChatMessage]) -> ExtractedConversation:
    # First system message wins, later ones are dropped
    system = next((m.content for m in messages if m.role == "system"), None)
    turns = [m for m in messages if m.role != "system"]
    return ExtractedConversation(system=system, turns=turns)


def build_anthropic_messages(turns: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    return [{"role": m.role, "content": m.content} for m in turns]


def build_google_history(turns: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    """Prior turns for a Gemini conversation; `user` stays `user`, anything else is `model`"""
    return [
        {"role": "user" if m.role == "user" else "model", "parts": [{"text": m.content}]}
        for m in turns
    ]
