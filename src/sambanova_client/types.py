"""Shared data types for the SambaNova client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypedDict, Union


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://api.sambanova.ai/v1"
DEFAULT_MODEL = "Meta-Llama-3.2-3B-Instruct"

# Known model identifiers.  Any string is accepted as a model name.
MODELS: tuple[str, ...] = (
    "Meta-Llama-3.2-1B-Instruct",
    "Meta-Llama-3.2-3B-Instruct",
    "Meta-Llama-3.1-8B-Instruct",
    "Meta-Llama-3.1-70B-Instruct",
    "Meta-Llama-3.1-405B-Instruct",
    "Llama-3.2-11B-Vision-Instruct",
    "Llama-3.2-90B-Vision-Instruct",
)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

Role = Literal["system", "user", "assistant"]


class ImageURL(TypedDict):
    url: str


class TextPart(TypedDict):
    type: Literal["text"]
    text: str


class ImagePart(TypedDict):
    type: Literal["image_url"]
    image_url: ImageURL


ContentPart = Union[TextPart, ImagePart]


class ChatMessage(TypedDict):
    """A role-tagged message.  ``content`` is a list only for vision models."""

    role: Role
    content: Union[str, list[ContentPart]]


# ---------------------------------------------------------------------------
# Per-call options
# ---------------------------------------------------------------------------

@dataclass
class ChatOptions:
    """Options for a single chat call.

    ``None`` means "use the client default" for ``model``, ``retry_count``
    and ``retry_delay``, and "use the server default" for ``max_tokens``.
    ``retry_delay`` is the backoff base in seconds.
    """

    model: str | None = None
    temperature: float = 0.1
    top_p: float = 0.1
    max_tokens: int | None = None
    stream: bool = False
    stream_options: dict[str, Any] | None = None
    retry_count: int | None = None
    retry_delay: float | None = None


def build_payload(
    messages: list[ChatMessage],
    model: str,
    options: ChatOptions,
) -> dict[str, Any]:
    """Assemble the ``/chat/completions`` request body."""
    payload: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "stream": options.stream,
    }
    if options.max_tokens is not None:
        payload["max_tokens"] = options.max_tokens
    if options.stream and options.stream_options:
        payload["stream_options"] = options.stream_options
    return payload
