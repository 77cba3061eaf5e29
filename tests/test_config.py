"""
Tests for configuration loading.
"""

import json

import pytest

from blockflow import config
from blockflow.config import RuntimeConfig


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "configuration.json"
    monkeypatch.setenv("BLOCKFLOW_CONFIG", str(path))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    return path


def test_defaults_without_a_file(config_file):
    assert config.get_blockflow_config() == {}
    assert config.get_preferred_model() == config.DEFAULT_MODEL
    assert config.get_max_tokens() == config.DEFAULT_MAX_TOKENS
    assert config.get_http_timeout() == config.DEFAULT_HTTP_TIMEOUT
    assert config.get_api_key() is None
    assert config.get_log_level() == "INFO"


def test_values_come_from_the_file(config_file, monkeypatch):
    config_file.write_text(
        json.dumps(
            {
                "llm": {
                    "provider": "anthropic",
                    "model": "claude-3-haiku",
                    "max_tokens": 256,
                    "api_key_env_var": "MY_KEY",
                    "api_base": "https://proxy.test",
                },
                "http": {"timeout": 5},
                "log_level": "DEBUG",
            }
        )
    )
    monkeypatch.setenv("MY_KEY", "secret")

    runtime = RuntimeConfig()

    assert runtime.model == "anthropic/claude-3-haiku"
    assert runtime.max_tokens == 256
    assert runtime.api_key == "secret"
    assert runtime.api_base == "https://proxy.test"
    assert runtime.http_timeout == 5.0
    assert runtime.log_level == "DEBUG"


def test_log_level_env_overrides_file(config_file, monkeypatch):
    config_file.write_text(json.dumps({"log_level": "DEBUG"}))
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    assert config.get_log_level() == "ERROR"


def test_unreadable_file_is_ignored(config_file):
    config_file.write_text("{broken")

    assert config.get_blockflow_config() == {}


def test_openrouter_key_is_the_fallback(config_file, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")

    assert config.get_api_key() == "or-key"
