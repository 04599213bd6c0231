"""
depgraph.config - Configuration loading and defaults

Configuration lives in ``.depgraph.toml`` (found by walking up to the git
root) with an optional uncommitted ``.depgraph.local.toml`` beside it.
Environment variables named ``DEPGRAPH_<SECTION>_<KEY>`` override both.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

import tomlkit

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".depgraph.toml"
LOCAL_CONFIG_FILENAME = ".depgraph.local.toml"
ENV_PREFIX = "DEPGRAPH_"

DEFAULT_CONFIG: dict[str, Any] = {
    "graph": {
        # Fail fast on cycles during root discovery instead of looping forever
        "detect_cycles": True,
        # Max first-dependency steps during root discovery, 0 = unlimited
        "max_root_depth": 0,
    },
}


class ConfigLoader:
    """Read-only view over a merged configuration dictionary.

    Keys are looked up with dotted paths, e.g. ``loader.get("graph.detect_cycles")``.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigLoader:
        """Create a loader from a plain dictionary (no defaults applied)."""
        return cls(copy.deepcopy(data))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key.

        Args:
            key: Dotted path such as "graph.max_root_depth".
            default: Returned when any path segment is missing.

        Returns:
            The configured value or default.
        """
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def as_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying configuration."""
        return copy.deepcopy(self._data)


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into base, returning a new dictionary.

    Nested tables merge key by key; any other value in override replaces
    the one in base.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment variable string into a typed value.

    JSON arrays/objects and true/false are decoded, as are integers.
    Malformed JSON and everything else come back unchanged.
    """
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if stripped.isdigit() or (stripped[:1] == "-" and stripped[1:].isdigit()):
        return int(stripped)
    return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply DEPGRAPH_<SECTION>_<KEY> environment variables to config.

    ``DEPGRAPH_GRAPH_MAX_ROOT_DEPTH=50`` sets ``graph.max_root_depth`` to 50.
    Missing sections are created. The config is modified in place and returned.
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not key:
            continue
        target = config.setdefault(section, {})
        if not isinstance(target, dict):
            continue
        target[key] = _try_parse_env_value(raw)
        logger.debug("Config override from %s: %s.%s", name, section, key)
    return config


def find_git_root(start: Path | None = None) -> Path | None:
    """Find the repository root containing ``.git``.

    A ``.git`` file (git worktree) counts as well as a directory.

    Args:
        start: Directory to start from, defaults to the current directory.

    Returns:
        The repository root, or None when not inside a repository.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if (directory / ".git").exists():
            return directory
    return None


def find_config_file(start: Path) -> Path | None:
    """Find ``.depgraph.toml`` in start or a parent, stopping at the git root.

    Args:
        start: Directory to start searching from.

    Returns:
        Path to the config file, or None if not found.
    """
    current = start.resolve()
    git_root = find_git_root(current)
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if git_root is not None and directory == git_root:
            break
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return tomlkit.parse(content).unwrap()


def validate_config(data: dict[str, Any]) -> dict[str, Any]:
    """Check the values read by the graph code.

    Args:
        data: Merged configuration dictionary.

    Returns:
        data, unchanged.

    Raises:
        ValueError: If [graph] is not a table, detect_cycles is not a
            boolean, or max_root_depth is not a non-negative integer.
    """
    graph = data.get("graph", {})
    if not isinstance(graph, dict):
        raise ValueError(f"[graph] must be a table, got {type(graph).__name__}")

    detect_cycles = graph.get("detect_cycles", True)
    if not isinstance(detect_cycles, bool):
        raise ValueError(f"graph.detect_cycles must be true or false, got {detect_cycles!r}")

    max_root_depth = graph.get("max_root_depth", 0)
    valid_depth = isinstance(max_root_depth, int) and not isinstance(max_root_depth, bool)
    if not valid_depth or max_root_depth < 0:
        raise ValueError(
            f"graph.max_root_depth must be a non-negative integer, got {max_root_depth!r}"
        )
    return data


def load_config(path: Path) -> ConfigLoader:
    """Load a configuration file merged over the defaults.

    A sibling ``.depgraph.local.toml`` is deep-merged on top when present,
    then environment overrides are applied.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        ConfigLoader for the merged configuration.

    Raises:
        FileNotFoundError: If path does not exist.
        ValueError: If a graph setting has the wrong type.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = merge_configs(DEFAULT_CONFIG, _read_toml(path))

    local_path = path.parent / LOCAL_CONFIG_FILENAME
    if local_path.is_file() and local_path.resolve() != path.resolve():
        data = merge_configs(data, _read_toml(local_path))
        logger.debug("Merged local config %s", local_path)

    logger.debug("Loaded config from %s", path)
    return ConfigLoader(validate_config(_apply_env_overrides(data)))


_active_config: ConfigLoader | None = None


def get_config() -> ConfigLoader:
    """Return the active configuration.

    Unless configure() was called, it is built on first use from the
    ``.depgraph.toml`` found from the current directory (see
    find_config_file), or from the defaults when there is none.
    Environment overrides apply in both cases.
    """
    global _active_config
    if _active_config is None:
        config_path = find_config_file(Path.cwd())
        if config_path is not None:
            _active_config = load_config(config_path)
        else:
            data = _apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))
            _active_config = ConfigLoader(validate_config(data))
    return _active_config


def configure(source: ConfigLoader | dict[str, Any] | Path | str) -> ConfigLoader:
    """Set the active configuration.

    Precedence, lowest first: defaults, then the dict or file, then
    ``DEPGRAPH_*`` environment variables. A ConfigLoader is used as given.

    Args:
        source: A ConfigLoader, a dict merged over the defaults, or a path
            to a TOML file passed to load_config().

    Returns:
        The ConfigLoader now in effect.

    Raises:
        ValueError: If a graph setting has the wrong type.
    """
    global _active_config
    if isinstance(source, ConfigLoader):
        validate_config(source.as_dict())
        _active_config = source
    elif isinstance(source, dict):
        data = _apply_env_overrides(merge_configs(DEFAULT_CONFIG, source))
        _active_config = ConfigLoader(validate_config(data))
    else:
        _active_config = load_config(Path(source))
    return _active_config


def reset_config() -> None:
    """Drop the active configuration so the next get_config() rebuilds it."""
    global _active_config
    _active_config = None


__all__ = [
    "CONFIG_FILENAME",
    "LOCAL_CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "ConfigLoader",
    "configure",
    "find_config_file",
    "find_git_root",
    "get_config",
    "load_config",
    "merge_configs",
    "reset_config",
    "validate_config",
]
