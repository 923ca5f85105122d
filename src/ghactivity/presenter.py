"""Turn GitHub API payloads into human-readable lines and table rows.

Events are dispatched on their ``type`` through :data:`EVENT_HANDLERS`.
Types without a handler are skipped silently: the events feed carries many
kinds of activity and only the ones listed here are summarised.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

NO_ACTIVITY = "No recent public activity found."

EventHandler = Callable[[dict[str, Any], str], str]


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _push(payload: dict[str, Any], repo: str) -> str:
    commits = payload.get("commits")
    if isinstance(commits, list):
        count = len(commits)
    else:
        count = int(payload.get("size") or 0)
    return f"Pushed {count} commit(s) to {repo}"


def _issues(payload: dict[str, Any], repo: str) -> str:
    action = str(payload.get("action") or "updated")
    return f"{_capitalize(action)} an issue in {repo}"


def _watch(payload: dict[str, Any], repo: str) -> str:
    return f"Starred {repo}"


def _fork(payload: dict[str, Any], repo: str) -> str:
    return f"Forked {repo}"


EVENT_HANDLERS: dict[str, EventHandler] = {
    "PushEvent": _push,
    "IssuesEvent": _issues,
    "WatchEvent": _watch,
    "ForkEvent": _fork,
}


def describe_event(event: Any) -> Optional[str]:
    """Return a one-line summary of *event*, or ``None`` for unknown shapes."""
    if not isinstance(event, dict):
        return None
    handler = EVENT_HANDLERS.get(event.get("type", ""))
    if handler is None:
        return None
    repo = (event.get("repo") or {}).get("name", "an unknown repository")
    payload = event.get("payload") or {}
    return handler(payload, repo)


def render_events(events: Any) -> list[str]:
    """Summarise a list of events, one line per recognised event.

    Args:
        events: The decoded ``/users/{user}/events`` payload.

    Returns:
        The summary lines, or a single "no activity" line when the list is
        empty. Unrecognised events are left out.
    """
    if not isinstance(events, list) or not events:
        return [NO_ACTIVITY]
    return [line for line in map(describe_event, events) if line is not None]


USER_FIELDS = (
    ("login", "Login"),
    ("name", "Name"),
    ("company", "Company"),
    ("location", "Location"),
    ("bio", "Bio"),
    ("public_repos", "Public repos"),
    ("followers", "Followers"),
    ("following", "Following"),
    ("created_at", "Joined"),
    ("html_url", "Profile"),
)


def user_rows(user: Any) -> list[list[str]]:
    """Return ``[label, value]`` rows for the profile fields that are set."""
    if not isinstance(user, dict):
        return []
    return [
        [label, str(user[field])]
        for field, label in USER_FIELDS
        if user.get(field) not in (None, "")
    ]
