#!/usr/bin/env python3
"""
Test explicit configuration requirements.
"""

import httpx
import pytest
import yaml

import chat_gpt_lib.config as config_module
from chat_gpt_lib.config import Configuration
from chat_gpt_lib.llm.client import ChatClient
from chat_gpt_lib.llm.exceptions import ConfigurationError

VALID_CONFIG = {
    "client": {
        "base_url": "https://proxy.example.com/v1",
        "model": "gpt-4o-mini",
        "timeout": 30,
        "temperature": 0.2,
        "max_tokens": 256,
        "organization": "org-yaml",
    },
    "logging": {"level": "DEBUG"},
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep a developer's .env and shell variables out of the tests."""
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_ORGANIZATION", raising=False)


def write_config(tmp_path, data) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(data))
    return str(path)


def test_default_config_file_is_valid():
    config = Configuration()
    client_config = config.get_client_config()
    assert client_config["base_url"].startswith("https://")
    assert client_config["max_tokens"] > 0
    assert config.get_logging_config()["level"] == "INFO"


def test_client_config_from_file(tmp_path):
    config = Configuration(write_config(tmp_path, VALID_CONFIG))
    client_config = config.get_client_config()

    assert client_config["model"] == "gpt-4o-mini"
    assert client_config["timeout"] == 30
    assert config.organization == "org-yaml"
    assert config.get_logging_config() == {"level": "DEBUG"}


def test_base_url_defaults_when_absent(tmp_path):
    data = {"client": {k: v for k, v in VALID_CONFIG["client"].items() if k != "base_url"}}
    config = Configuration(write_config(tmp_path, data))
    assert config.get_client_config()["base_url"] == "https://api.openai.com/v1/"


@pytest.mark.parametrize("missing", ["model", "timeout", "temperature", "max_tokens"])
def test_required_keys(tmp_path, missing):
    client = {k: v for k, v in VALID_CONFIG["client"].items() if k != missing}
    config = Configuration(write_config(tmp_path, {"client": client}))

    with pytest.raises(ConfigurationError, match=f"client.{missing} must be explicitly configured"):
        config.get_client_config()


@pytest.mark.parametrize("key, value", [
    ("timeout", 0),
    ("timeout", "fast"),
    ("temperature", 3),
    ("max_tokens", 0),
    ("base_url", "ftp://example.com"),
])
def test_invalid_values(tmp_path, key, value):
    client = {**VALID_CONFIG["client"], key: value}
    config = Configuration(write_config(tmp_path, {"client": client}))

    with pytest.raises(ConfigurationError):
        config.get_client_config()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        Configuration(tmp_path / "nope.yaml")


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError, match="must be YAML dict"):
        Configuration(path)


def test_api_key_from_environment(tmp_path, monkeypatch):
    config = Configuration(write_config(tmp_path, VALID_CONFIG))

    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        _ = config.api_key

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert config.api_key == "sk-test"


def test_organization_env_overrides_yaml(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_ORGANIZATION", "org-env")
    config = Configuration(write_config(tmp_path, VALID_CONFIG))
    assert config.organization == "org-env"


def test_client_from_config(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    config = Configuration(write_config(tmp_path, VALID_CONFIG))

    client = ChatClient.from_config(
        config, transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )

    assert client.base_url == "https://proxy.example.com/v1/"
    assert client.client.headers["OpenAI-Organization"] == "org-yaml"
    assert client.client.headers["Authorization"] == "Bearer sk-test"
    assert client.client.timeout.read == 30
