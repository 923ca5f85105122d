"""HTTP client module for ghactivity.

Provides :class:`GitHubClient`, a blocking client for the public GitHub
REST API backed by :class:`httpx.Client`. Its ``fetch_events`` and
``fetch_user`` methods are the fetchers handed to
:meth:`~ghactivity.cache.service.ActivityService.get_or_fetch`.

Example::

    from ghactivity.client import GitHubClient
    from ghactivity.models import RequestConfig

    with GitHubClient(RequestConfig()) as client:
        events = client.fetch_events("octocat")
"""

from ghactivity.client.github import GitHubClient

__all__ = ["GitHubClient"]
