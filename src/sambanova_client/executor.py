"""HTTP request execution with retry and exponential backoff.

API errors (non-2xx status) are terminal and raised on first occurrence.
Transport failures are retried ``retry_count`` times with a delay of
``retry_delay * 2 ** attempt`` seconds; the last one is raised when the
attempts run out.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from .errors import HTTPX_TRANSPORT_ERRORS, APIError, SambanovaError, TransportError

_logger = logging.getLogger(__name__)

CHAT_COMPLETIONS = "/chat/completions"


def _parse_error_body(body: bytes) -> tuple[str, str | None, Any]:
    """Return ``(message, code, details)`` from an error response body."""
    try:
        data = json.loads(body) if body else {}
    except ValueError:
        text = body.decode("utf-8", errors="replace")
        return text.strip() or "API request failed", None, text

    if not isinstance(data, dict):
        return "API request failed", None, data

    # OpenAI-style bodies nest the fields under "error"
    source = data.get("error") if isinstance(data.get("error"), dict) else data
    message = source.get("message") or "API request failed"
    code = source.get("code")
    return str(message), str(code) if code is not None else None, data


class RequestExecutor:
    """Issues authenticated POST requests against a base URL."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        retry_count: int = 3,
        retry_delay: float = 1.0,
        timeout: float | None = None,
    ) -> None:
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
        )

    async def execute(
        self,
        endpoint: str,
        payload: dict[str, Any],
        *,
        retry_count: int | None = None,
        retry_delay: float | None = None,
        stream: bool = False,
    ) -> Any:
        """POST *payload* to *endpoint*.

        Returns the decoded JSON body, or the open ``httpx.Response`` (body
        unread) when *stream* is true.  The caller owns a returned response
        and must close it.
        """
        retries = self.retry_count if retry_count is None else retry_count
        delay = self.retry_delay if retry_delay is None else retry_delay
        last_error: SambanovaError | None = None

        for attempt in range(retries + 1):
            try:
                return await self._attempt(endpoint, payload, stream)
            except SambanovaError as e:
                if not e.retryable:
                    raise
                last_error = e
                _logger.warning(
                    "Request to %s failed (attempt %d/%d): %s",
                    endpoint, attempt + 1, retries + 1, e,
                )
                if attempt < retries:
                    await asyncio.sleep(delay * (2 ** attempt))

        raise last_error or TransportError("Request failed after retries")

    async def _attempt(
        self,
        endpoint: str,
        payload: dict[str, Any],
        stream: bool,
    ) -> Any:
        _logger.debug("POST %s (stream=%s)", endpoint, stream)
        try:
            request = self._client.build_request("POST", endpoint, json=payload)
            resp = await self._client.send(request, stream=True)
        except HTTPX_TRANSPORT_ERRORS as e:
            raise TransportError(f"Request failed: {e}") from e

        if not resp.is_success:
            try:
                body = await resp.aread()
            except HTTPX_TRANSPORT_ERRORS:
                body = b""
            finally:
                await resp.aclose()
            message, code, details = _parse_error_body(body)
            raise APIError(message, resp.status_code, code, details)

        if stream:
            return resp

        try:
            await resp.aread()
            return resp.json()
        except HTTPX_TRANSPORT_ERRORS as e:
            raise TransportError(f"Failed to read response: {e}") from e
        except ValueError as e:
            raise TransportError(
                f"Malformed JSON response: {e}", status=resp.status_code,
            ) from e
        finally:
            await resp.aclose()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
