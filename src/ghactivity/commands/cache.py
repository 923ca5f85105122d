"""Cache commands -- inspect and empty the response cache.

Provides the ``ghactivity cache`` sub-command group. Cached responses live
under :func:`~ghactivity.config.get_cache_dir`, one directory per
:class:`~ghactivity.models.CacheCategory` and one JSON file per username.
Entries expire on their own; ``clear`` is only needed to force every lookup
back to the network or to reclaim disk space.
"""

from __future__ import annotations

from typing import Optional

import typer

from ghactivity.cache import CacheStore
from ghactivity.config import get_cache_dir, resolve_config
from ghactivity.models import CacheCategory
from ghactivity.output import get_output, info, success


cache_app = typer.Typer(no_args_is_help=True)


def _stores(categories: list[CacheCategory]) -> list[CacheStore]:
    config = resolve_config()
    root = get_cache_dir()
    return [
        CacheStore(root, category.value, ttl_seconds=config.cache.ttl_seconds)
        for category in categories
    ]


@cache_app.command("info")
def cache_info() -> None:
    """Show where cached responses live and how many there are.

    Example::

        ghactivity cache info
        ghactivity --json cache info
    """
    config = resolve_config()
    state = "enabled" if config.cache.enabled else "disabled"
    info(f"Cache {state}, TTL {config.cache.ttl_seconds}s")

    rows = [
        [store.namespace, str(store.directory), str(len(store.entries()))]
        for store in _stores(list(CacheCategory))
    ]
    get_output().print_table(["Category", "Directory", "Entries"], rows, title="Cache")


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    category: Optional[CacheCategory] = typer.Option(
        None, "--category", "-c", help="Only clear this category."
    ),
) -> None:
    """Delete cached responses.

    Asks for confirmation unless ``--force`` is active.

    Example::

        ghactivity cache clear
        ghactivity --force cache clear --category events
    """
    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Delete cached responses?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    categories = [category] if category is not None else list(CacheCategory)
    removed = sum(store.clear() for store in _stores(categories))
    success(f"Removed {removed} cached response(s).")
