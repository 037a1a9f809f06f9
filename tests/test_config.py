"""
Tests for configuration loading and validation.
"""
import dataclasses
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from easynote.config import AIConfig, OrchestratorConfig
from easynote.exceptions import NotInitializedError

ENV_KEYS = [
    "ARK_BASE_URL",
    "ARK_MODEL_ID",
    "ARK_API_KEY",
    "AI_RETRY_ENABLED",
    "AI_MAX_RETRY_COUNT",
    "AI_RETRY_DELAY_MS",
    "AI_TIMEOUT",
    "ARK_THINKING_TYPE",
    "AI_LOG_BODIES",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_from_env_reads_everything(clean_env):
    clean_env.setenv("ARK_BASE_URL", "https://ark.example.com/api/v3/")
    clean_env.setenv("ARK_MODEL_ID", "doubao-seed")
    clean_env.setenv("ARK_API_KEY", "sk-secret")
    clean_env.setenv("AI_RETRY_ENABLED", "false")
    clean_env.setenv("AI_MAX_RETRY_COUNT", "5")
    clean_env.setenv("AI_RETRY_DELAY_MS", "250")
    clean_env.setenv("AI_TIMEOUT", "30")
    clean_env.setenv("ARK_THINKING_TYPE", "disabled")
    clean_env.setenv("AI_LOG_BODIES", "yes")

    config = AIConfig.from_env()

    assert config.model_id == "doubao-seed"
    assert config.retry_enabled is False
    assert config.max_retry_count == 5
    assert config.retry_delay_ms == 250
    assert config.timeout == 30.0
    assert config.thinking_type == "disabled"
    assert config.log_bodies is True
    assert config.chat_url == "https://ark.example.com/api/v3/chat/completions"
    assert config.auth_header == "Bearer sk-secret"


def test_from_env_defaults(clean_env):
    clean_env.setenv("ARK_BASE_URL", "https://ark.example.com")
    clean_env.setenv("ARK_MODEL_ID", "m")
    clean_env.setenv("ARK_API_KEY", "k")

    config = AIConfig.from_env()

    assert config.retry_enabled is True
    assert config.max_retry_count == 3
    assert config.retry_delay_ms == 1000
    assert config.timeout == 60.0
    assert config.thinking_type is None
    assert config.log_bodies is False


def test_missing_settings_are_not_initialized(clean_env):
    clean_env.setenv("ARK_BASE_URL", "https://ark.example.com")

    with pytest.raises(NotInitializedError) as info:
        AIConfig.from_env()

    assert "model_id" in info.value.message
    assert "api_key" in info.value.message


def test_invalid_retry_settings():
    with pytest.raises(ValueError):
        AIConfig(base_url="u", model_id="m", api_key="k", max_retry_count=-1)
    with pytest.raises(ValueError):
        AIConfig(base_url="u", model_id="m", api_key="k", retry_delay_ms=-5)
    with pytest.raises(ValueError):
        AIConfig(base_url="u", model_id="m", api_key="k", timeout=0)


def test_orchestrator_policy():
    assert OrchestratorConfig(retry_enabled=True, max_retry_count=4).max_attempts == 4
    assert OrchestratorConfig(retry_enabled=False, max_retry_count=4).max_attempts == 0
    assert OrchestratorConfig(retry_delay_ms=1500).retry_delay_seconds == 1.5


def test_config_is_frozen_and_hides_key():
    config = AIConfig(base_url="u", model_id="m", api_key="sk-very-secret")

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.api_key = "other"
    assert "sk-very-secret" not in repr(config)
    assert config.orchestrator == OrchestratorConfig()
