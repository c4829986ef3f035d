"""Unit tests for LLM utilities."""

import pytest
from types import SimpleNamespace

from edugrade.libs.llm import API_KEY_ENV, create_agent, extract_output


class TestCreateAgent:
    """Test the create_agent function."""

    def test_create_agent_with_defaults(self):
        """Test creating agent with default configuration."""
        config_map = {
            "llm": {
                "api_key": "test-key",
                "base_url": "https://api.deepseek.com",
                "model": "deepseek-chat",
                "pydantic_ai_settings": {}
            }
        }

        agent = create_agent(config_map)

        assert agent is not None
        assert agent.model.model_name == "deepseek-chat"

    def test_create_agent_with_model_override(self):
        """Test that the model argument overrides the config value."""
        custom_configs = {
            "llm": {
                "api_key": "custom-key",
                "model": "deepseek-chat"
            }
        }

        agent = create_agent(configs=custom_configs, model="deepseek-reasoner")

        assert agent.model.model_name == "deepseek-reasoner"

    def test_create_agent_with_system_prompt(self):
        """Test creating agent with custom system prompt."""
        test_configs = {"llm": {"api_key": "test-key"}}

        agent = create_agent(
            configs=test_configs,
            system_prompt="You are an expert educational grader."
        )

        assert agent is not None

    def test_create_agent_missing_api_key(self, monkeypatch):
        """Test that missing API key raises ValueError."""
        monkeypatch.delenv(API_KEY_ENV, raising=False)

        with pytest.raises(ValueError, match="No API key configured"):
            create_agent({"llm": {"api_key": ""}})

    def test_create_agent_api_key_from_environment(self, monkeypatch):
        """Test that the API key falls back to the environment."""
        monkeypatch.setenv(API_KEY_ENV, "env-key")

        agent = create_agent({"llm": {"model": "deepseek-chat"}})

        assert agent is not None

    def test_create_agent_with_settings_dict(self):
        """Test that settings merge over the configured ones."""
        test_configs = {
            "llm": {
                "api_key": "test-key",
                "pydantic_ai_settings": {"temperature": 0.3, "max_tokens": 500}
            }
        }

        agent = create_agent(
            configs=test_configs,
            settings_dict={"temperature": 0.7}
        )

        assert agent.model_settings["temperature"] == 0.7
        assert agent.model_settings["max_tokens"] == 500


class TestExtractOutput:
    """Test pulling text out of run results."""

    def test_output_attribute(self):
        assert extract_output(SimpleNamespace(output="hello")) == "hello"

    def test_data_attribute(self):
        assert extract_output(SimpleNamespace(data="legacy")) == "legacy"

    def test_plain_string(self):
        assert extract_output("raw") == "raw"
