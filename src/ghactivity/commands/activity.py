"""Lookup commands -- ``ghactivity activity`` and ``ghactivity user``.

Both commands follow the same flow:

1. Take the username from the positional argument, or prompt for it.
2. Resolve the effective configuration (TTL, API root, token).
3. Ask :class:`~ghactivity.cache.service.ActivityService` for the payload,
   with a :class:`~ghactivity.client.github.GitHubClient` method as the
   fetcher. The HTTP client is only opened on a cache miss.
4. Report whether the data came from the cache, then render it.

Errors raised here (:class:`~ghactivity.exceptions.GhActivityError`
subclasses) are reported once by :func:`ghactivity.app.main`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import typer

from ghactivity.cache import ActivityService, CacheStore, FetchResult
from ghactivity.client import GitHubClient
from ghactivity.config import get_cache_dir, resolve_config, resolve_credential
from ghactivity.exceptions import InvalidUsageError
from ghactivity.models import CacheCategory, GlobalConfig
from ghactivity.output import OutputFormat, get_output, info, progress, warning
from ghactivity.presenter import render_events, user_rows


def _ctx_flag(ctx: typer.Context, name: str) -> bool:
    return bool(ctx.obj.get(name, False)) if ctx.obj else False


def _resolve_username(ctx: typer.Context, username: Optional[str]) -> str:
    """Return the username argument, prompting for it when missing."""
    if username is None:
        if _ctx_flag(ctx, "no_input"):
            raise InvalidUsageError("A GitHub username is required when prompting is disabled")
        username = typer.prompt("Enter GitHub username")
    username = username.strip()
    if not username:
        raise InvalidUsageError("A GitHub username is required")
    return username


def build_service(config: GlobalConfig, category: CacheCategory) -> ActivityService:
    """Create the service for *category*, honouring ``cache.enabled``."""
    if not config.cache.enabled:
        return ActivityService(None)
    store = CacheStore(get_cache_dir(), category.value, ttl_seconds=config.cache.ttl_seconds)
    return ActivityService(store)


def _format_age(age: timedelta) -> str:
    seconds = max(int(age.total_seconds()), 0)
    minutes, seconds = divmod(seconds, 60)
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def lookup(
    username: str,
    category: CacheCategory,
    refresh: bool = False,
    ttl: Optional[int] = None,
) -> FetchResult:
    """Run the get-or-fetch flow for *username* in *category*.

    Args:
        username: The GitHub username (cache key).
        category: Which kind of payload to look up.
        refresh: Bypass the cache lookup.
        ttl: Optional TTL override in seconds.

    Returns:
        The :class:`~ghactivity.cache.service.FetchResult`.
    """
    config = resolve_config(cli_ttl=ttl)
    token_source = config.request.token_source
    token = resolve_credential(token_source) if token_source else None
    service = build_service(config, category)

    def fetch(key: str) -> Any:
        with GitHubClient(config.request, token=token) as client:
            if category is CacheCategory.EVENTS:
                return client.fetch_events(key)
            return client.fetch_user(key)

    result = service.get_or_fetch(username, fetch, refresh=refresh)

    if result.from_cache and result.stored_at is not None:
        age = datetime.now(timezone.utc) - result.stored_at
        info(f"Loaded from cache ({_format_age(age)} old)")
    if result.write_error is not None:
        warning(f"Could not cache the response: {result.write_error}")
    return result


def activity_command(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(
        None, help="GitHub username. Prompted for when omitted."
    ),
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Ignore cached data and fetch again."
    ),
    ttl: Optional[int] = typer.Option(
        None, "--ttl", help="Cache TTL in seconds for this run."
    ),
) -> None:
    """Show a user's recent public activity.

    Example::

        ghactivity activity octocat
        ghactivity --json activity octocat --refresh
    """
    name = _resolve_username(ctx, username)
    progress(f"Fetching activity for {name}...")
    result = lookup(name, CacheCategory.EVENTS, refresh=refresh, ttl=ttl)

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(result.payload)
    else:
        output.print_lines(render_events(result.payload))


def user_command(
    ctx: typer.Context,
    username: Optional[str] = typer.Argument(
        None, help="GitHub username. Prompted for when omitted."
    ),
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Ignore cached data and fetch again."
    ),
    ttl: Optional[int] = typer.Option(
        None, "--ttl", help="Cache TTL in seconds for this run."
    ),
) -> None:
    """Show a user's public profile.

    Example::

        ghactivity user octocat
    """
    name = _resolve_username(ctx, username)
    progress(f"Fetching profile for {name}...")
    result = lookup(name, CacheCategory.USERS, refresh=refresh, ttl=ttl)

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_response(result.payload)
    else:
        output.print_table(["Field", "Value"], user_rows(result.payload), title=name)
