"""ghactivity -- show a GitHub user's recent public activity from the terminal.

The CLI fetches a user's public events (or profile) from the GitHub REST
API, keeps a time-boxed copy of every response on disk, and renders a short
human-readable summary. Repeated lookups within the cache TTL are served
from disk without touching the network.

Typical usage::

    ghactivity activity octocat       # recent events
    ghactivity user octocat --json    # raw profile JSON
    ghactivity cache info             # where cached responses live

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic configuration models.
    config: XDG-aware configuration and precedence resolution.
    cache: Time-boxed file cache and the get-or-fetch service.
    client: GitHub REST client built on httpx.
    presenter: Event and profile rendering.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
