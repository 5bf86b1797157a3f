"""Configuration loading utilities for the Nova chat server.

This module handles layered configuration:
1. Explicit path argument (highest precedence)
2. Environment variable NOVA_CHAT_CONFIG
3. Fallback to "config/default.yaml"

It also supports optional overrides from environment variables with prefix
``NOVA_CHAT__`` (e.g., NOVA_CHAT__RESPONDER__SEED=7).
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "NOVA_CHAT__"
DEFAULT_CONFIG_PATH = "config/default.yaml"

DEFAULT_SYSTEM_PROMPT = (
    "You are a concise, upbeat digital guide named Nova. You draw from the "
    "conversation history, think step by step, and offer practical, actionable "
    "help in plain language."
)

DEFAULTS: Dict[str, Any] = {
    "server": {"cors_origins": ["*"]},
    "persona": {"system_prompt": DEFAULT_SYSTEM_PROMPT},
    "responder": {"seed": None},
    "client": {"base_url": "http://127.0.0.1:8000", "endpoint": "/api/chat"},
}


def _coerce(value: str) -> Any:
    """Parse simple scalar types (bool, int, float) from an env string."""
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    if value.lower() in {"null", "none"}:
        return None
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides with prefix NOVA_CHAT__."""
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        # e.g., NOVA_CHAT__CLIENT__BASE_URL -> cfg["client"]["base_url"]
        parts = key[len(ENV_PREFIX):].lower().split("__")
        sub = cfg
        for p in parts[:-1]:
            if p not in sub or not isinstance(sub[p], dict):
                sub[p] = {}
            sub = sub[p]
        leaf = parts[-1]
        if leaf == "cors_origins":
            sub[leaf] = [o.strip() for o in value.split(",") if o.strip()]
        else:
            sub[leaf] = _coerce(value)
    return cfg


def _merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``extra`` on top of ``base`` (returns ``base``)."""
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load YAML configuration for the chat server.

    Parameters
    ----------
    path : str | None
        Optional path to a configuration file. If not provided, the
        environment variable ``NOVA_CHAT_CONFIG`` is consulted. As a
        last resort ``config/default.yaml`` is used.

    Returns
    -------
    Dict[str, Any]
        Built-in defaults, overlaid with the file contents, with environment
        overrides applied last.
    """
    if path is None:
        path = os.environ.get("NOVA_CHAT_CONFIG", DEFAULT_CONFIG_PATH)

    cfg = copy.deepcopy(DEFAULTS)
    path_obj = Path(path)
    if not path_obj.exists():
        logger.warning("Config file not found at %s. Using defaults.", path_obj)
        return _apply_env_overrides(cfg)

    with path_obj.open("r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Failed to parse config file {path_obj}: {e}") from e

    if not isinstance(loaded, dict):
        raise RuntimeError(f"Invalid config format in {path_obj}, expected dict.")

    return _apply_env_overrides(_merge(cfg, loaded))
