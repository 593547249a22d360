"""Client configuration.

Config discovery (first match wins):
  1. explicit ``path`` argument
  2. ``./sambanova.yaml``
  3. ``~/.config/sambanova/config.yaml``
  4. Built-in defaults

``SAMBANOVA_API_KEY`` supplies the API key when the file does not.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .types import DEFAULT_BASE_URL, DEFAULT_MODEL

_logger = logging.getLogger(__name__)

API_KEY_ENV = "SAMBANOVA_API_KEY"


@dataclass(frozen=True)
class ClientConfig:
    """Construction-time settings for :class:`SambanovaClient`.

    ``default_retry_delay`` is the backoff base in seconds.  ``timeout``
    of ``None`` leaves individual requests unbounded.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    default_model: str = DEFAULT_MODEL
    default_retry_count: int = 3
    default_retry_delay: float = 1.0
    timeout: float | None = None


_SEARCH_PATHS = [
    Path("./sambanova.yaml"),
    Path.home() / ".config" / "sambanova" / "config.yaml",
]


def _from_raw(raw: dict[str, Any]) -> ClientConfig:
    defaults = ClientConfig()
    return ClientConfig(
        api_key=raw.get("api_key") or os.environ.get(API_KEY_ENV, ""),
        base_url=raw.get("base_url", defaults.base_url),
        default_model=raw.get("default_model", defaults.default_model),
        default_retry_count=int(
            raw.get("default_retry_count", defaults.default_retry_count),
        ),
        default_retry_delay=float(
            raw.get("default_retry_delay", defaults.default_retry_delay),
        ),
        timeout=raw.get("timeout", defaults.timeout),
    )


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Load configuration from YAML.

    Parameters
    ----------
    path:
        Explicit config path.  If *None*, search default locations.

    Returns
    -------
    ClientConfig
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            _logger.warning("Config file not found: %s, using defaults", path)
            return _from_raw({})
    else:
        for candidate in _SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    if config_path is None:
        _logger.info("No config file found, using defaults")
        return _from_raw({})

    _logger.info("Loading config from %s", config_path)
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return _from_raw(raw)
