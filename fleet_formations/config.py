"""Layered catalog configuration.

A catalog document is built from layers merged in order: the bundled data,
override files given on the command line, ``FLEET_FORMATIONS__*`` environment
variables and finally explicit overrides passed by the caller. Later layers
win key by key; nested mappings merge, anything else is replaced.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Optional
import logging
import os

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "FLEET_FORMATIONS__"


def deep_merge(base: Mapping[str, Any], *layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge ``layers`` over ``base`` without touching either input."""
    out: Dict[str, Any] = dict(base or {})
    for layer in layers:
        for key, value in (layer or {}).items():
            current = out.get(key)
            if isinstance(value, Mapping) and isinstance(current, Mapping):
                out[key] = deep_merge(current, value)
            else:
                out[key] = value
    return out


def _read_document(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            # JSON is a subset of YAML, so one parser covers both
            doc = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config file {path}: {exc}") from exc
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ConfigError(f"config file {path} must hold a mapping, got {type(doc).__name__}")
    return doc


def load_configs(paths: Iterable[str] | None) -> Dict[str, Any]:
    """Read and merge YAML/JSON documents in the given order."""
    merged: Dict[str, Any] = {}
    for path in paths or ():
        logger.debug("merging config file %s", path)
        merged = deep_merge(merged, _read_document(path))
    return merged


def _parse_scalar(raw: str) -> Any:
    # YAML scalar rules: "12" -> 12, "1.5" -> 1.5, "true" -> True; the rest stays text
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if value is None or isinstance(value, (dict, list)):
        return raw
    return value


def env_overrides(
    prefix: str = DEFAULT_ENV_PREFIX, environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Nested overrides from ``<prefix>SECTION__KEY__FIELD=value`` variables.

    Path segments are lower-cased and empty segments are ignored, so
    ``FLEET_FORMATIONS__SHIPS__SCOUT__SPEED=10`` becomes
    ``{"ships": {"scout": {"speed": 10}}}``.
    """
    environ = os.environ if environ is None else environ
    out: Dict[str, Any] = {}
    for name in sorted(environ):
        if not name.startswith(prefix):
            continue
        path = [part.lower() for part in name[len(prefix):].split("__") if part]
        if not path:
            continue
        node = out
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = _parse_scalar(environ[name])
    if out:
        logger.debug("environment overrides under %s: %s", prefix, sorted(out))
    return out


__all__ = ["deep_merge", "load_configs", "env_overrides", "DEFAULT_ENV_PREFIX"]
