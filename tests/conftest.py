"""
Shared test fixtures.
"""

import pytest

from swap_chat_agent.config import (
    AgentBehaviourConfig, AgentConfig, AgentsConfig, Config, LLMConfig, ValidationConfig
)


@pytest.fixture
def make_config():
    """Build an in-memory configuration with overridable limits."""
    def _make(max_history=10, max_history_turns=50, max_message_length=100):
        return Config(
            llm=LLMConfig(api_key="test-key"),
            agents=AgentsConfig(
                action_agent=AgentConfig(name="Constructor", persona_file="constructor.json"),
                summarize_agent=AgentConfig(name="Summarizer", persona_file="summarize.json"),
            ),
            agent=AgentBehaviourConfig(max_history=max_history),
            validation=ValidationConfig(max_message_length=max_message_length, max_history_turns=max_history_turns),
        )
    return _make
