"""
Custom exceptions for the swap chat agent.
Provides specific error types for better error handling and debugging.
"""

from typing import Optional, Dict, Any, List


class SwapAgentError(Exception):
    """Base exception for all swap chat agent errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the exception."""
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(SwapAgentError):
    """Raised when there's a configuration error."""
    pass


class UnsupportedProviderError(ConfigurationError):
    """Raised when the configured LLM provider is not supported."""

    def __init__(self, provider: str):
        """Initialize the provider error."""
        super().__init__(f"Unsupported AI provider: {provider}", "UNSUPPORTED_PROVIDER", {"provider": provider})
        self.provider = provider


class ValidationError(SwapAgentError):
    """Raised when an inbound request cannot be turned into a chat turn."""
    pass


class AgentError(SwapAgentError):
    """Raised when an agent encounters an error."""

    def __init__(self, message: str, agent_name: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the agent error."""
        super().__init__(message, error_code, details)
        self.agent_name = agent_name


class LLMError(SwapAgentError):
    """Raised when LLM calls fail."""
    pass


class ActionParseError(SwapAgentError):
    """Raised when one or more action blocks in an LLM response cannot be parsed."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        """Initialize the parse error."""
        super().__init__(message, "ACTION_PARSE_ERROR", {"block_errors": len(errors or [])})
        self.errors = list(errors or [])


class ToolError(SwapAgentError):
    """Raised when a tool encounters an error."""

    def __init__(self, message: str, tool_name: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the tool error."""
        super().__init__(message, error_code, details)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """Raised when an action names a tool that is not registered."""

    def __init__(self, tool_name: str):
        """Initialize the tool lookup error."""
        super().__init__(f"Tool {tool_name} not found", tool_name, "TOOL_NOT_FOUND")


class ToolNotExecutableError(ToolError):
    """Raised when a registered tool has no callable execute."""

    def __init__(self, tool_name: str):
        """Initialize the tool execution error."""
        super().__init__(f"Tool {tool_name} does not have an execute method", tool_name, "TOOL_NOT_EXECUTABLE")


class TokenNotSupportedError(ToolError):
    """Raised when a token symbol is not in the aggregator's token list."""

    def __init__(self, message: str, symbol: str):
        """Initialize the token error."""
        super().__init__(message, "swap", "TOKEN_NOT_SUPPORTED", {"symbol": symbol})
        self.symbol = symbol


class AggregatorError(SwapAgentError):
    """Raised when a DeFi aggregator API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the aggregator error."""
        super().__init__(message, "AGGREGATOR_ERROR", details)
        self.status_code = status_code

