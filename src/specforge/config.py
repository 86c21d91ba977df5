"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specforge:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specforge/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specforge.models.GlobalConfig`
  JSON file storing user-wide defaults (strictness, output format).
* **Marker files** -- One ``.specforge.json`` per generation target, next
  to the base specification, deserialised into a
  :class:`~specforge.models.MarkerConfig`. Managed via
  :func:`load_marker` and :func:`save_marker`.
* **Precedence resolution** -- :func:`resolve_config` merges the CLI flag,
  the ``SPECFORGE_STRICTNESS`` environment variable, the marker file, and
  the global config into the effective configuration for one run.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional, Union

from specforge.exceptions import ConfigError
from specforge.models import GlobalConfig, MarkerConfig, ValidationStrictness

logger = logging.getLogger(__name__)

_APP_NAME = "specforge"
_CONFIG_FILENAME = "config.json"
MARKER_FILENAME = ".specforge.json"
STRICTNESS_ENV_VAR = "SPECFORGE_STRICTNESS"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/specforge/`` (default ``~/.config/specforge/``).
    On macOS/Windows: ``~/.specforge/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specforge/`` (default ``~/.local/share/specforge/``).
    On macOS/Windows: ``~/.specforge/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
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
        fd = None  # prevent double-close in finally
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


def write_text_atomic(path: Union[str, Path], data: str) -> None:
    """Public wrapper around :func:`_atomic_write` for output files."""
    _atomic_write(Path(path), data)


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~specforge.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Marker files ---


def marker_path(spec_path: Union[str, Path]) -> Path:
    """Path of the ``.specforge.json`` marker that belongs to *spec_path*.

    *spec_path* may name the base specification or its directory.
    """
    path = Path(spec_path)
    directory = path if path.is_dir() else path.parent
    return directory / MARKER_FILENAME


def load_marker(spec_path: Union[str, Path]) -> Optional[MarkerConfig]:
    """Load the marker file next to *spec_path*.

    Returns:
        The parsed :class:`~specforge.models.MarkerConfig`, or ``None`` when
        no marker exists.

    Raises:
        ConfigError: If the marker contains invalid JSON or fails validation.
    """
    path = marker_path(spec_path)
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return MarkerConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid marker file at {path}: {exc}") from exc


def save_marker(spec_path: Union[str, Path], marker: MarkerConfig) -> Path:
    """Persist *marker* atomically next to *spec_path* and return its path.

    Only explicitly set fields are written, so defaults (notably the
    strictness) keep deferring to the user config on the next load.
    """
    path = marker_path(spec_path)
    data = marker.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def _parse_strictness(value: str, source: str) -> ValidationStrictness:
    try:
        return ValidationStrictness(value.strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in ValidationStrictness)
        raise ConfigError(
            f"Invalid strictness '{value}' from {source} (expected one of: {choices})"
        ) from None


def resolve_config(
    spec_path: Optional[Union[str, Path]] = None,
    cli_strictness: Optional[str] = None,
) -> MarkerConfig:
    """Resolve the effective configuration for one run.

    Precedence for the validation strictness (high to low):
        1. CLI flag (``cli_strictness``)
        2. Environment variable (``SPECFORGE_STRICTNESS``)
        3. Marker file next to *spec_path*
        4. User config (``~/.config/specforge/config.json``)
        5. Defaults

    All other fields come from the marker file when one exists, otherwise
    from :class:`~specforge.models.MarkerConfig` defaults.

    Raises:
        ConfigError: If a config file is invalid or a strictness value is
            not recognised.
    """
    global_cfg = load_global_config()
    marker = load_marker(spec_path) if spec_path is not None else None

    strictness = global_cfg.default_strictness
    if marker is not None and "strictness" in marker.model_fields_set:
        strictness = marker.strictness

    env_value = os.environ.get(STRICTNESS_ENV_VAR)
    if env_value:
        strictness = _parse_strictness(env_value, STRICTNESS_ENV_VAR)
    if cli_strictness is not None:
        strictness = _parse_strictness(cli_strictness, "--strictness")

    base = marker if marker is not None else MarkerConfig()
    resolved = base.model_copy(update={"strictness": strictness})
    logger.debug(
        "Resolved config for %s: strictness=%s marker=%s",
        spec_path or "<none>",
        strictness.value,
        marker is not None,
    )
    return resolved
