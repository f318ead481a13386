"""
Server configuration.

The only setting is the base address requests are sent to. Components
take an explicit ServerConfig; when given none they fall back to a
process-wide default.

The process-wide default is initialised at most once, on first use, under
a lock. It can be overridden with `set_endpoint_base_url()` only before
anything has read it. After that it is read-only.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

from gjcodec.errors import ConfigError


BOOMLINGS_ENDPOINTS_BASE = "https://www.boomlings.com/database/"


@dataclass(frozen=True)
class ServerConfig:
    """
    Properties:
        base_url: Prefix every endpoint name is appended to (with trailing slash)
    """

    base_url: str = BOOMLINGS_ENDPOINTS_BASE

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"


def load_config(path: Union[str, Path]) -> ServerConfig:
    """
    Load a ServerConfig from a YAML file.

    The file must hold a mapping; `base_url` is optional.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the content is not a valid configuration
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ServerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")

    unknown = set(data) - {"base_url"}
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")

    base_url = data.get("base_url", BOOMLINGS_ENDPOINTS_BASE)
    if not isinstance(base_url, str) or not base_url:
        raise ConfigError("base_url must be a non-empty string")
    return ServerConfig(base_url=base_url)


_default_lock = threading.Lock()
_default_config: Optional[ServerConfig] = None


def set_endpoint_base_url(url: str) -> None:
    """
    Override the process-wide base address.

    Raises:
        ConfigError: If the default has already been initialised
    """
    global _default_config
    with _default_lock:
        if _default_config is not None:
            raise ConfigError("endpoint base URL is already initialised")
        _default_config = ServerConfig(base_url=url)


def default_config() -> ServerConfig:
    """Return the process-wide ServerConfig, initialising it on first call."""
    global _default_config
    with _default_lock:
        if _default_config is None:
            _default_config = ServerConfig()
        return _default_config


def endpoint_base_url() -> str:
    return default_config().base_url


__all__ = [
    "BOOMLINGS_ENDPOINTS_BASE",
    "ServerConfig",
    "load_config",
    "set_endpoint_base_url",
    "default_config",
    "endpoint_base_url",
]
