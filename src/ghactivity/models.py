"""Pydantic configuration models shared across ghactivity modules.

The models are serialised as JSON in the user's config directory and
loaded by :func:`~ghactivity.config.load_global_config`:
:class:`RequestConfig`, :class:`OutputConfig`, :class:`CacheConfig` and the
top-level :class:`GlobalConfig`. :class:`CacheCategory` names the cache
namespaces that live side by side under the cache directory.

The persisted cache entry itself lives next to the store that writes it,
in :mod:`ghactivity.cache.store`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_TTL_SECONDS = 600
DEFAULT_BASE_URL = "https://api.github.com"


class CacheCategory(str, enum.Enum):
    """Namespaces of cached data. Each maps to its own directory."""

    EVENTS = "events"
    USERS = "users"


class RequestConfig(BaseModel):
    """HTTP settings for every call made to the GitHub API."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="GitHub API root URL")
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(
        default=0, ge=0, description="Retries on 5xx and network errors"
    )
    token_source: Optional[str] = Field(
        default=None,
        description="Optional credential source for a GitHub token: env:VAR or file:/path",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable response caching")
    ttl_seconds: int = Field(
        default=DEFAULT_TTL_SECONDS, gt=0, description="Cache TTL in seconds"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/ghactivity/config.json``.

    Loaded and saved by :func:`~ghactivity.config.load_global_config` and
    :func:`~ghactivity.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~ghactivity.config.resolve_config`
    for the full precedence chain.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
