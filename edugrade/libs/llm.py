"""LLM utilities for creating and configuring AI agents."""


import logging
import os
from typing import Optional, Dict, Any

from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel, OpenAIChatModelSettings
from pydantic_ai.providers.openai import OpenAIProvider

from edugrade.libs.config_loader import ConfigType, get_config


# Fix up logging level for httpx to WARNING to reduce noise
logging.getLogger("httpx").setLevel(logging.WARNING)

API_KEY_ENV = "DEEPSEEK_API_KEY"


def create_agent(configs: ConfigType,
                 model: Optional[str] = None,
                 settings_dict: Optional[Dict[str, Any]] = None,
                 system_prompt: Optional[str] = None) -> Agent:
    """
    Create a pydantic-ai Agent for an OpenAI-compatible chat endpoint.

    Args:
        configs: Configuration dictionary (required)
        model: Model to use (overrides config value)
        settings_dict: Pydantic AI settings dict (overrides config values)
        system_prompt: System prompt for the agent (optional)

    Returns:
        Configured Agent

    Raises:
        ValueError: If no API key is found in config or environment
    """
    api_key = get_config("llm.api_key", configs, default=None) or os.environ.get(API_KEY_ENV)
    if not api_key:
        raise ValueError(f"No API key configured: set llm.api_key or {API_KEY_ENV}")
    base_url = get_config("llm.base_url", configs, default=None)
    model = model or get_config("llm.model", configs, default="deepseek-chat")
    base_settings = get_config("llm.pydantic_ai_settings", configs, default={}) or {}

    settings_dict = base_settings | (settings_dict or {})
    model_settings = OpenAIChatModelSettings(**settings_dict) if settings_dict else None
    provider = OpenAIProvider(base_url=base_url, api_key=api_key)
    chat_model = OpenAIChatModel(model, provider=provider)
    if system_prompt:
        agent = Agent(
            model=chat_model,
            model_settings=model_settings,
            system_prompt=system_prompt,
            retries=0,
        )
    else:
        agent = Agent(
            model=chat_model,
            model_settings=model_settings,
            retries=0,
        )
    return agent


def extract_output(result: Any) -> str:
    """Pull the text out of an agent run result."""
    if hasattr(result, 'output'):
        return str(result.output)
    elif hasattr(result, 'data'):
        return str(result.data)
    return str(result)
