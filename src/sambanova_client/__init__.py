"""Async client for the SambaNova chat-completion API."""

from sambanova_client.client import SambanovaClient
from sambanova_client.config import ClientConfig, load_config
from sambanova_client.errors import (
    APIError,
    ErrorKind,
    FrameDecodeError,
    ImageProcessingError,
    ProtocolViolationError,
    SambanovaError,
    TransportError,
    ValidationError,
)
from sambanova_client.streaming import ResponseStream
from sambanova_client.types import MODELS, ChatMessage, ChatOptions
from sambanova_client.validation import is_vision_model, validate_message

__all__ = [
    "APIError",
    "ChatMessage",
    "ChatOptions",
    "ClientConfig",
    "ErrorKind",
    "FrameDecodeError",
    "ImageProcessingError",
    "MODELS",
    "ProtocolViolationError",
    "ResponseStream",
    "SambanovaClient",
    "SambanovaError",
    "TransportError",
    "ValidationError",
    "is_vision_model",
    "load_config",
    "validate_message",
]
