"""Message-shape checks against model capability."""

from __future__ import annotations

from typing import Iterable

from .errors import ValidationError
from .types import ChatMessage


def is_vision_model(model: str) -> bool:
    """Vision capability is a naming convention: the name contains "vision"."""
    return "vision" in model.lower()


def validate_message(message: ChatMessage, is_vision: bool) -> None:
    """Raise :class:`ValidationError` if *message* content does not fit.

    List content is only accepted by vision models, and vision models only
    accept list content.
    """
    content = message.get("content")
    if isinstance(content, list):
        if not is_vision:
            raise ValidationError(
                "Array content is only supported for vision models",
            )
    elif is_vision:
        raise ValidationError("Vision models require array content format")


def validate_messages(messages: Iterable[ChatMessage], model: str) -> None:
    vision = is_vision_model(model)
    for message in messages:
        validate_message(message, vision)
