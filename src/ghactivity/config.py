"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for ghactivity:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ghactivity/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_data_dir`.
* **Global config** -- A single :class:`~ghactivity.models.GlobalConfig`
  JSON file storing defaults (API root, cache TTL, output format).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
* **Credential resolution** -- :func:`resolve_credential` reads an optional
  GitHub token from an env var or a file.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`); the response cache reuses it for its entries.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from ghactivity.exceptions import ConfigError
from ghactivity.models import GlobalConfig

_APP_NAME = "ghactivity"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "ghactivity.json"

_TRUTHY = ("1", "true", "yes", "on")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/ghactivity/`` (default ``~/.config/ghactivity/``).
    On macOS/Windows: ``~/.ghactivity/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache root directory, creating it if necessary.

    Holds one subdirectory per :class:`~ghactivity.models.CacheCategory`.
    Cached data can be safely deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/ghactivity/`` (default ``~/.cache/ghactivity/``).
    On macOS/Windows: ``~/.ghactivity/cache/``.

    Returns:
        Absolute path to the cache directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CACHE_HOME", (".cache",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ghactivity/`` (default ``~/.local/share/ghactivity/``).
    On macOS/Windows: ``~/.ghactivity/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~ghactivity.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./ghactivity.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. It holds any subset of the
    :class:`~ghactivity.models.GlobalConfig` keys, e.g.
    ``{"cache": {"ttl_seconds": 60}}``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but does not contain a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with *override* merged in, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_format: Optional[str] = None,
    cli_ttl: Optional[int] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_ttl``)
        2. Environment variables (``GHACTIVITY_BASE_URL``,
           ``GHACTIVITY_CACHE_TTL``, ``GHACTIVITY_NO_CACHE``)
        3. Project config (``./ghactivity.json``)
        4. User config (``~/.config/ghactivity/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~ghactivity.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    # 5 + 4. Load base global config (fills in defaults automatically)
    global_cfg = load_global_config()

    # 3. Layer in project-local config
    project = load_project_config()
    if project:
        try:
            global_cfg = GlobalConfig.model_validate(
                _deep_merge(global_cfg.model_dump(mode="json"), project)
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment variables
    env_base_url = os.environ.get("GHACTIVITY_BASE_URL")
    if env_base_url:
        global_cfg.request.base_url = env_base_url

    env_ttl = os.environ.get("GHACTIVITY_CACHE_TTL")
    if env_ttl:
        global_cfg.cache.ttl_seconds = _parse_ttl(env_ttl, "GHACTIVITY_CACHE_TTL")

    env_no_cache = os.environ.get("GHACTIVITY_NO_CACHE", "")
    if env_no_cache.lower() in _TRUTHY:
        global_cfg.cache.enabled = False

    # 1. CLI flags (highest precedence)
    if cli_ttl is not None:
        global_cfg.cache.ttl_seconds = _parse_ttl(str(cli_ttl), "--ttl")
    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg


def _parse_ttl(raw: str, origin: str) -> int:
    """Parse a positive TTL in seconds, naming *origin* in the error."""
    try:
        ttl = int(raw)
    except ValueError:
        raise ConfigError(f"Expected an integer TTL from {origin}, got: {raw}") from None
    if ttl <= 0:
        raise ConfigError(f"TTL from {origin} must be positive, got: {ttl}")
    return ttl


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        file_path = source[5:]
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")
