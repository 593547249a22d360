"""Resolve image references in vision messages to embedded data URIs."""

from __future__ import annotations

import asyncio
import base64
import logging
from pathlib import Path

import httpx

from .errors import ImageProcessingError
from .types import ChatMessage

_logger = logging.getLogger(__name__)

# MIME type assumed for local files and for remote responses without one
DEFAULT_IMAGE_MIME = "image/jpeg"


def _to_data_uri(data: bytes, mime: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{encoded}"


async def _fetch_remote(url: str, http: httpx.AsyncClient) -> str:
    try:
        resp = await http.get(url)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ImageProcessingError(
            f"Failed to fetch image {url}: HTTP {e.response.status_code}",
            details={"url": url, "status": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        raise ImageProcessingError(
            f"Failed to fetch image {url}: {e}", details={"url": url},
        ) from e

    mime = resp.headers.get("content-type", "").split(";")[0].strip()
    return _to_data_uri(resp.content, mime or DEFAULT_IMAGE_MIME)


async def _read_local(path: str) -> str:
    try:
        data = await asyncio.to_thread(Path(path).expanduser().read_bytes)
    except OSError as e:
        raise ImageProcessingError(
            f"Failed to read image {path}: {e}", details={"path": path},
        ) from e
    return _to_data_uri(data, DEFAULT_IMAGE_MIME)


async def resolve_image_url(
    url: str,
    http: httpx.AsyncClient | None = None,
) -> str:
    """Turn *url* into a self-contained ``data:<mime>;base64,...`` URI.

    Data URIs pass through unchanged.  ``http...`` addresses are fetched,
    anything else is read as a local path.
    """
    if url.startswith("data:"):
        return url
    if url.startswith("http"):
        if http is not None:
            return await _fetch_remote(url, http)
        async with httpx.AsyncClient(follow_redirects=True) as own:
            return await _fetch_remote(url, own)
    return await _read_local(url)


async def prepare_messages(
    messages: list[ChatMessage],
    http: httpx.AsyncClient | None = None,
) -> None:
    """Rewrite every ``image_url`` part in *messages* in place."""
    for message in messages:
        content = message.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if part.get("type") != "image_url":
                continue
            image = part.get("image_url") or {}
            url = image.get("url")
            if not isinstance(url, str) or not url:
                raise ImageProcessingError(
                    "Image part is missing image_url.url", details=part,
                )
            if url.startswith("data:"):
                continue
            _logger.debug("Embedding image %s", url)
            image["url"] = await resolve_image_url(url, http)
