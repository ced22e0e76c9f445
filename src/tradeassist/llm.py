from __future__ import annotations

from typing import Protocol, cast

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from .config import get_settings


class TextGenerator(Protocol):
    def generate(self, system: str, user: str) -> str: ...


_model: ChatOpenAI | None = None


def get_model() -> ChatOpenAI:
    """
    Lazily create and cache a ChatOpenAI model.

    Relies on the OPENAI_API_KEY environment variable.
    """
    global _model
    if _model is None:
        _model = ChatOpenAI(
            model=get_settings().openai_model,
            temperature=0.7,
            max_tokens=160,  # one SMS worth of reply  # type: ignore[call-arg]
            max_retries=0,
        )
    return _model


class ChatGenerator:
    """Single-shot chat completion: one system instruction, one user message."""

    def __init__(self, model: BaseChatModel | None = None) -> None:
        self._model = model

    @property
    def model(self) -> BaseChatModel:
        if self._model is None:
            self._model = get_model()
        return self._model

    def generate(self, system: str, user: str) -> str:
        messages = [
            SystemMessage(content=system),
            HumanMessage(content=user),
        ]
        response = self.model.invoke(messages)
        # For ChatOpenAI, response.content is always a string
        content = cast(str, response.content)  # type: ignore[reportUnknownMemberType]
        return content.strip()
