"""Configuration management for the chat completions client."""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from chat_gpt_lib.llm.client import DEFAULT_BASE_URL
from chat_gpt_lib.llm.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")

API_KEY_ENV = "OPENAI_API_KEY"
ORGANIZATION_ENV = "OPENAI_ORGANIZATION"


class Configuration:
    """Manages configuration and environment variables for the client."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config = self._load_yaml_config(self.config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: Path) -> dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(config_path) as file:
                config = yaml.safe_load(file)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Config file must be YAML dict, got {type(config)}"
            )
        return config

    @property
    def api_key(self) -> str:
        """Get the API key.

        Returns:
            The API key as a string.

        Raises:
            ConfigurationError: If the API key is not found in environment variables.
        """
        api_key = os.getenv(API_KEY_ENV)
        if not api_key:
            raise ConfigurationError(
                f"API key '{API_KEY_ENV}' not found in environment variables"
            )
        return api_key

    @property
    def organization(self) -> str | None:
        """Get the organization ID, preferring the environment over YAML."""
        return os.getenv(ORGANIZATION_ENV) or self.get_client_section().get(
            "organization"
        )

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_client_section(self) -> dict[str, Any]:
        section = self._config.get("client", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'client' section must be a mapping")
        return section

    def get_client_config(self) -> dict[str, Any]:
        """Get chat client configuration from YAML.

        Returns:
            Client configuration dictionary with validated values.

        Raises:
            ConfigurationError: If required parameters are missing or invalid.
        """
        client_config = dict(self.get_client_section())
        client_config.setdefault("base_url", DEFAULT_BASE_URL)

        required_keys = ["model", "timeout", "temperature", "max_tokens"]
        for key in required_keys:
            if key not in client_config:
                raise ConfigurationError(
                    f"client.{key} must be explicitly configured in "
                    f"{self.config_path.name}"
                )

        timeout = client_config["timeout"]
        temperature = client_config["temperature"]
        max_tokens = client_config["max_tokens"]

        if not isinstance(timeout, int | float) or timeout <= 0:
            raise ConfigurationError("client.timeout must be a positive number")
        if not isinstance(temperature, int | float) or not 0 <= temperature <= 2:
            raise ConfigurationError("client.temperature must be between 0 and 2")
        if not isinstance(max_tokens, int) or max_tokens < 1:
            raise ConfigurationError("client.max_tokens must be a positive integer")
        if not str(client_config["base_url"]).startswith(("http://", "https://")):
            raise ConfigurationError("client.base_url must be an http(s) URL")

        return client_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})
