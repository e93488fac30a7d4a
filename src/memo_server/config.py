"""Configuration loading utilities for the memo proxy server.

This module handles layered configuration:
1. Explicit path argument (highest precedence)
2. Environment variable MEMO_SERVER_CONFIG
3. Fallback to "config/default.yaml"

It also supports optional overrides from environment variables with prefix
``MEMO_SERVER__`` (e.g., MEMO_SERVER__GEMINI__MODEL=gemini-1.5-flash).
Secrets may instead come from the conventional ``GEMINI_API_KEY``,
``GH_CLIENT_ID`` and ``GH_CLIENT_SECRET`` variables.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "server": {"host": "127.0.0.1", "port": 8000, "cors_origins": ["*"]},
    "logging": {"level": "INFO"},
    "gemini": {
        "api_url": "https://generativelanguage.googleapis.com/v1beta",
        "model": "gemini-pro",
        "timeout": 30.0,
    },
    "github": {
        "authorize_url": "https://github.com/login/oauth/authorize",
        "token_url": "https://github.com/login/oauth/access_token",
        "api_url": "https://api.github.com",
        "default_redirect": "http://localhost:3000/callback",
        "scope": "user",
        "timeout": 15.0,
    },
}

# (section, key) <- conventional env var, used only when the config leaves it empty
_SECRET_ENV = {
    ("gemini", "api_key"): "GEMINI_API_KEY",
    ("github", "client_id"): "GH_CLIENT_ID",
    ("github", "client_secret"): "GH_CLIENT_SECRET",
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides with prefix MEMO_SERVER__."""
    prefix = "MEMO_SERVER__"
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        # e.g., MEMO_SERVER__GEMINI__MODEL -> cfg["gemini"]["model"]
        parts = key[len(prefix):].lower().split("__")
        sub = cfg
        for p in parts[:-1]:
            if p not in sub or not isinstance(sub[p], dict):
                sub[p] = {}
            sub = sub[p]
        leaf = parts[-1]
        # Attempt to parse simple types (bool, int, float)
        if value.lower() in {"true", "false"}:
            sub[leaf] = value.lower() == "true"
        else:
            try:
                if "." in value:
                    sub[leaf] = float(value)
                else:
                    sub[leaf] = int(value)
            except ValueError:
                sub[leaf] = value
    return cfg


def _apply_secret_env(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), env_name in _SECRET_ENV.items():
        sub = cfg.setdefault(section, {})
        if not sub.get(key) and os.environ.get(env_name):
            sub[key] = os.environ[env_name]
    return cfg


def load_config(path: str | None = None) -> Dict[str, Any]:
    """Load YAML configuration for the memo server.

    Parameters
    ----------
    path : str | None
        Optional path to a configuration file. If not provided, the
        environment variable ``MEMO_SERVER_CONFIG`` is consulted. As a
        last resort ``config/default.yaml`` is used.

    Returns
    -------
    Dict[str, Any]
        Defaults merged with the file, with environment overrides applied.
    """
    # Resolve path precedence
    if path is None:
        path = os.environ.get("MEMO_SERVER_CONFIG", "config/default.yaml")

    path_obj = Path(path)
    if not path_obj.exists():
        logger.warning("Config file not found at %s. Using defaults.", path_obj)
        return _apply_secret_env(_apply_env_overrides(copy.deepcopy(DEFAULTS)))

    with path_obj.open("r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Failed to parse config file {path_obj}: {e}")

    if not isinstance(loaded, dict):
        raise RuntimeError(f"Invalid config format in {path_obj}, expected dict.")

    cfg = _merge(DEFAULTS, loaded)
    return _apply_secret_env(_apply_env_overrides(cfg))
