from __future__ import annotations

import pytest
from pydantic import ValidationError

from modgate_ai.server.core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("MODGATE_AI_SERVER_PORT", "MODGATE_AI_MODEL", "MODGATE_AI_TRUSTED_MODULES", "OPENAI_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)

    assert s.server_host == "0.0.0.0"
    assert s.server_port == 3000
    assert s.model == "openai:gpt-4o-mini"
    assert s.trusted_modules == ["list"]
    assert s.approval_ttl_seconds == 900
    assert s.max_chain_depth == 8
    assert s.structured_calls is False
    assert s.modules_dir is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODGATE_AI_SERVER_PORT", "8080")
    monkeypatch.setenv("MODGATE_AI_TRUSTED_MODULES", '["list", "math"]')
    monkeypatch.setenv("MODGATE_AI_MAX_CHAIN_DEPTH", "3")
    monkeypatch.setenv("MODGATE_AI_STRUCTURED_CALLS", "true")

    s = Settings(_env_file=None)

    assert s.server_port == 8080
    assert s.trusted_modules == ["list", "math"]
    assert s.max_chain_depth == 3
    assert s.structured_calls is True


def test_invalid_chain_depth_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODGATE_AI_MAX_CHAIN_DEPTH", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_provider_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

    s = Settings(_env_file=None, MODGATE_AI_MODEL="anthropic:claude-sonnet-4-0")

    assert s.model_provider == "anthropic"
    assert s.anthropic.api_key == "sk-ant-test"
    assert s.provider_configured() is True
    assert Settings(_env_file=None).provider_configured() is False


def test_cors_group(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example"]')
    cors = Settings(_env_file=None).cors
    assert cors.origins == ["https://app.example"]
    assert cors.allow_methods == ["*"]
