"""Shared blockflow configuration utilities.

Reads ~/.blockflow/configuration.json (or the file named by BLOCKFLOW_CONFIG)
so the CLI, the engine and the bundled blocks share one set of defaults.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_MODEL = "openrouter/anthropic/claude-3.5-sonnet"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_HTTP_TIMEOUT = 30.0

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

BLOCKFLOW_CONFIG_FILE = Path.home() / ".blockflow" / "configuration.json"


def get_config_path() -> Path:
    """Return the configuration file path, honouring BLOCKFLOW_CONFIG."""
    override = os.environ.get("BLOCKFLOW_CONFIG")
    if override:
        return Path(override)
    return BLOCKFLOW_CONFIG_FILE


def get_blockflow_config() -> dict[str, Any]:
    """Load blockflow configuration; missing or unreadable files yield {}."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Derived helpers
# ---------------------------------------------------------------------------


def get_preferred_model() -> str:
    """Return the configured model string (e.g. 'openrouter/anthropic/claude-3.5-sonnet')."""
    llm = get_blockflow_config().get("llm", {})
    if llm.get("provider") and llm.get("model"):
        return f"{llm['provider']}/{llm['model']}"
    return DEFAULT_MODEL


def get_max_tokens() -> int:
    """Return the configured max_tokens, falling back to DEFAULT_MAX_TOKENS."""
    return get_blockflow_config().get("llm", {}).get("max_tokens", DEFAULT_MAX_TOKENS)


def get_api_key() -> str | None:
    """Return the API key from the environment variable named in configuration."""
    llm = get_blockflow_config().get("llm", {})
    api_key_env_var = llm.get("api_key_env_var")
    if api_key_env_var:
        return os.environ.get(api_key_env_var)
    return os.environ.get("OPENROUTER_API_KEY")


def get_api_base() -> str | None:
    return get_blockflow_config().get("llm", {}).get("api_base")


def get_http_timeout() -> float:
    """Return the default timeout (seconds) for HTTP-backed blocks."""
    return float(get_blockflow_config().get("http", {}).get("timeout", DEFAULT_HTTP_TIMEOUT))


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL") or get_blockflow_config().get("log_level", "INFO")


# ---------------------------------------------------------------------------
# RuntimeConfig – shared by the engine, the CLI and the blocks
# ---------------------------------------------------------------------------


@dataclass
class RuntimeConfig:
    """Runtime configuration loaded from the blockflow configuration file."""

    model: str = field(default_factory=get_preferred_model)
    temperature: float = 0.7
    max_tokens: int = field(default_factory=get_max_tokens)
    api_key: str | None = field(default_factory=get_api_key)
    api_base: str | None = field(default_factory=get_api_base)
    http_timeout: float = field(default_factory=get_http_timeout)
    log_level: str = field(default_factory=get_log_level)
