"""
Application context for the swap chat agent.

The context is built once per process: ``get_system`` guards construction
with a lock so concurrent first requests share a single instance.
"""

import threading
from typing import Dict, Any, Optional

from .agents import ActionAgent, SummarizeAgent
from .aggregator import AggregatorClient
from .config import ConfigManager
from .logging_manager import LoggingManager
from .orchestrator import WorkflowOrchestrator
from .persona import load_persona
from .swap import create_swap_tool
from .validation import InputValidator


class SwapChatSystem:
    """Wires configuration, logging, tools and agents together."""

    def __init__(self, config_path: Optional[str] = None, console_logging: bool = True):
        """Initialize the swap chat system."""
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self.config_manager.validate_config(self.config)

        # Setup logging
        self.logging_manager = LoggingManager(self.config, console=console_logging)
        self.logger = self.logging_manager.get_logger("system")

        # Initialize components
        self.aggregator = AggregatorClient(self.config.aggregator, self.logger)
        self.tools = [create_swap_tool(self.aggregator, self.logger)]
        self.validator = InputValidator(self.config, self.logger)

        # Initialize agents
        agents_config = self.config.agents
        self.summarize_agent = SummarizeAgent(
            agents_config.summarize_agent.name,
            load_persona(agents_config.summarize_agent.persona_file),
            self.config.llm,
            self.logger,
        )
        self.action_agent = ActionAgent(
            agents_config.action_agent.name,
            load_persona(agents_config.action_agent.persona_file),
            self.tools,
            self.summarize_agent,
            self.config.llm,
            self.logger,
            strict_parsing=self.config.agent.strict_parsing,
        )

        self.orchestrator = WorkflowOrchestrator(self.action_agent, self.validator, self.logger)

        self.logger.info("Swap chat system initialized successfully")

    async def process_message(self, message: Any, conversation_history: Any = None) -> Dict[str, Any]:
        """Process a chat message through the turn workflow."""
        self.logger.info("Processing chat message")
        return await self.orchestrator.process_message(message, conversation_history)

    def get_system_info(self) -> Dict[str, Any]:
        """Get system information."""
        return {
            "agents": {
                "action_agent": self.action_agent.name,
                "summarize_agent": self.summarize_agent.name,
            },
            "tools": self.action_agent.tool_registry.names(),
            "config": {
                "provider": self.config.llm.provider,
                "model": self.config.llm.model,
                "temperature": self.config.llm.temperature,
                "max_tokens": self.config.llm.max_tokens,
                "chain_id": self.config.aggregator.chain_id,
                "strict_parsing": self.config.agent.strict_parsing,
            },
            "logging": self.logging_manager.get_system_info(),
        }


_system: Optional[SwapChatSystem] = None
_system_lock = threading.Lock()


def get_system(config_path: Optional[str] = None) -> SwapChatSystem:
    """Return the process-wide system, building it on first use."""
    global _system
    if _system is None:
        with _system_lock:
            if _system is None:
                _system = SwapChatSystem(config_path)
    return _system


def reset_system() -> None:
    """Drop the process-wide system (used by tests)."""
    global _system
    with _system_lock:
        _system = None
