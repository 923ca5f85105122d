"""Synchronous GitHub REST client with error mapping and optional retry.

This module provides :class:`GitHubClient`, the fetcher used by the
``activity`` and ``user`` commands. It wraps :class:`httpx.Client` and
turns every outcome into either decoded JSON or one of the typed fetch
failures:

- **404** -- :class:`~ghactivity.exceptions.NotFoundError`
- **any other non-200** -- :class:`~ghactivity.exceptions.UpstreamError`
  carrying the status code
- **undecodable body** -- :class:`~ghactivity.exceptions.ParseError`
- **network / timeout** -- :class:`~ghactivity.exceptions.ConnectionError_`

Retries (5xx and network errors, exponential backoff) are off by default
and controlled by :attr:`~ghactivity.models.RequestConfig.max_retries`.
"""

from __future__ import annotations

import json
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ghactivity import __version__
from ghactivity.exceptions import ConnectionError_, NotFoundError, ParseError, UpstreamError
from ghactivity.models import RequestConfig
from ghactivity.output import get_output

USER_AGENT = "github-activity-cli"
ACCEPT = "application/vnd.github.v3+json"


class GitHubClient:
    """Blocking client for the public GitHub REST API.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Request settings (``base_url``, ``timeout``,
            ``max_retries``).
        token: Optional GitHub token sent as a bearer credential.
        transport: Optional httpx transport, used by tests to plug in
            :class:`httpx.MockTransport`.

    Example::

        with GitHubClient(RequestConfig()) as client:
            events = client.fetch_events("octocat")
    """

    def __init__(
        self,
        config: RequestConfig,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._token = token
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> GitHubClient:
        headers = {
            "User-Agent": f"{USER_AGENT}/{__version__}",
            "Accept": ACCEPT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.Client(
            base_url=self._config.base_url.rstrip("/"),
            timeout=self._config.timeout,
            headers=headers,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Fetchers
    # ------------------------------------------------------------------ #

    def fetch_events(self, username: str) -> Any:
        """Fetch the public events of *username*.

        Returns:
            The decoded JSON list of event objects.
        """
        return self._get_json(f"/users/{quote(username, safe='')}/events")

    def fetch_user(self, username: str) -> Any:
        """Fetch the public profile of *username*.

        Returns:
            The decoded JSON profile object.
        """
        return self._get_json(f"/users/{quote(username, safe='')}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_json(self, path: str) -> Any:
        """GET *path* and decode the body, raising typed errors on failure."""
        response = self._execute_with_retry("GET", path)
        self._map_response_error(response)
        try:
            return json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError("Failed to parse response") from exc

    def _execute_with_retry(self, method: str, path: str) -> httpx.Response:
        """Execute the request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(method, path)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(f"Could not reach {self._config.base_url}: {exc}") from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue

            return response

        raise UpstreamError(0, "Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for any non-200 status."""
        status = response.status_code
        if status == 200:
            return
        if status == 404:
            raise NotFoundError("User not found")
        raise UpstreamError(status)
