"""Error types raised by the SambaNova client.

Every error carries an :class:`ErrorKind` so callers (and the request
executor) can branch on the failure class instead of on exception types:

  validation   - message content does not match the model capability
  image        - an image reference could not be resolved
  api          - the server answered with a non-success status
  transport    - network / decode failure before a status was obtained
  protocol     - stream / non-stream contract breach inside the client
  frame_decode - one streaming frame was not valid JSON (never raised)
"""

from __future__ import annotations

import enum
from typing import Any

import httpx

INVALID_MESSAGE_FORMAT = "INVALID_MESSAGE_FORMAT"
INVALID_IMAGE_FORMAT = "INVALID_IMAGE_FORMAT"

# httpx failures that mean the connection or body read broke; InvalidURL
# and the StreamError family sit outside httpx.HTTPError
HTTPX_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, httpx.InvalidURL)


class ErrorKind(enum.Enum):
    """Failure classes produced by the client."""

    VALIDATION = "validation"
    IMAGE = "image"
    API = "api"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    FRAME_DECODE = "frame_decode"


class SambanovaError(Exception):
    """Base error for everything the client raises."""

    kind: ErrorKind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSPORT

    def __str__(self) -> str:
        if self.status is not None:
            return f"[{self.status}] {self.message}"
        return self.message


class ValidationError(SambanovaError):
    """Message content shape does not fit the target model."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message, 400, INVALID_MESSAGE_FORMAT, details)


class ImageProcessingError(SambanovaError):
    """An image reference could not be turned into a data URI."""

    kind = ErrorKind.IMAGE

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message, 400, INVALID_IMAGE_FORMAT, details)


class APIError(SambanovaError):
    """The API answered with a non-success HTTP status."""

    kind = ErrorKind.API


class TransportError(SambanovaError):
    """Request failed before a server status was obtained."""

    kind = ErrorKind.TRANSPORT


class ProtocolViolationError(SambanovaError):
    """Executor returned a stream when JSON was expected, or vice versa."""

    kind = ErrorKind.PROTOCOL


class FrameDecodeError(SambanovaError):
    """A single ``data:`` frame carried invalid JSON.

    Reported to the decode-error callback and logged; the stream continues.
    """

    kind = ErrorKind.FRAME_DECODE

    def __init__(self, message: str, frame: str) -> None:
        super().__init__(message, details={"frame": frame})
        self.frame = frame
