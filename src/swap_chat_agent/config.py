"""
Configuration management for the swap chat agent.
"""

import os
import yaml
from typing import Any, Optional
from pathlib import Path
from pydantic import BaseModel
from dotenv import load_dotenv


SUPPORTED_PROVIDERS = ("anthropic",)


class LLMConfig(BaseModel):
    """LLM provider configuration."""
    provider: str = "anthropic"
    api_key: str = ""
    model: str = "claude-3-5-sonnet-20241022"
    temperature: float = 0.0
    max_tokens: int = 2048
    timeout: float = 60.0


class AgentConfig(BaseModel):
    """Individual agent configuration."""
    name: str
    persona_file: str


class AgentsConfig(BaseModel):
    """Configuration for all agents."""
    action_agent: AgentConfig
    summarize_agent: AgentConfig


class AgentBehaviourConfig(BaseModel):
    """Turn processing behaviour."""
    strict_parsing: bool = True
    max_history: int = 10


class AggregatorConfig(BaseModel):
    """DeFi aggregator (1inch) configuration."""
    base_url: str = "https://api.1inch.dev"
    api_key: str = ""
    chain_id: int = 8453
    slippage: float = 1.0
    timeout: int = 30


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = "logs/swap_chat_agent.log"


class ValidationConfig(BaseModel):
    """Input validation configuration."""
    max_message_length: int = 2000
    min_message_length: int = 1
    max_history_turns: int = 50


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 5600


class Config(BaseModel):
    """Main configuration class."""
    llm: LLMConfig
    agents: AgentsConfig
    agent: AgentBehaviourConfig = AgentBehaviourConfig()
    aggregator: AggregatorConfig = AggregatorConfig()
    logging: LoggingConfig = LoggingConfig()
    validation: ValidationConfig = ValidationConfig()
    server: ServerConfig = ServerConfig()


class ConfigManager:
    """Configuration manager for the swap chat agent."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager."""
        self.config_path = config_path or os.getenv("SWAP_AGENT_CONFIG", "config.yaml")
        load_dotenv()  # Load environment variables

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        try:
            config_file = Path(self.config_path)
            if not config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(config_file, 'r', encoding='utf-8') as file:
                config_data = yaml.safe_load(file) or {}

            # Substitute environment variables
            config_data = self._substitute_env_vars(config_data)

            config = Config(**config_data)
            return self._resolve_paths(config, config_file.parent)

        except Exception as e:
            raise RuntimeError(f"Failed to load configuration: {str(e)}")

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute environment variables in configuration."""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
            env_var = data[2:-1]
            # Handle default values like ${ONEINCH_CHAIN_ID:-8453}
            if ":-" in env_var:
                var_name, default_value = env_var.split(":-", 1)
                return os.getenv(var_name, default_value)
            else:
                return os.getenv(env_var, "")
        else:
            return data

    def _resolve_paths(self, config: Config, base_dir: Path) -> Config:
        """Make persona file paths relative to the configuration file."""
        for agent in (config.agents.action_agent, config.agents.summarize_agent):
            persona_path = Path(agent.persona_file)
            if not persona_path.is_absolute():
                agent.persona_file = str(base_dir / persona_path)
        return config

    def validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        if config.llm.provider.lower() not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported AI provider: {config.llm.provider}")

        if not config.llm.api_key or config.llm.api_key.strip() == "":
            raise ValueError("LLM API key is required. Please set ANTHROPIC_API_KEY environment variable.")

        if not config.aggregator.api_key or config.aggregator.api_key.strip() == "":
            raise ValueError("Aggregator API key is required. Please set ONEINCH_API_KEY environment variable.")

        # Validate temperature and token limits
        if config.llm.temperature < 0 or config.llm.temperature > 1:
            raise ValueError("Temperature must be between 0 and 1")

        if config.llm.max_tokens < 1:
            raise ValueError("Max tokens must be positive")

        if config.llm.timeout <= 0 or config.aggregator.timeout <= 0:
            raise ValueError("Timeouts must be positive")

        if config.agent.max_history < 0:
            raise ValueError("Max history must not be negative")

        for agent in (config.agents.action_agent, config.agents.summarize_agent):
            if not Path(agent.persona_file).exists():
                raise ValueError(f"Persona file not found for {agent.name}: {agent.persona_file}")

        # Create necessary directories
        logs_dir = Path(config.logging.file).parent
        logs_dir.mkdir(parents=True, exist_ok=True)
