"""
Tool descriptors and the tool registry used by the action agent.
"""

import logging
from typing import Dict, Any, Optional, List, Iterable
from abc import ABC, abstractmethod
from pydantic import BaseModel, ConfigDict

from .exceptions import ToolNotFoundError, ToolNotExecutableError
from .models import ToolResponse


class ToolDescriptor(BaseModel):
    """A named capability the action agent can dispatch to."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: Dict[str, str] = {}
    execute: Any = None


def create_error_response(error: BaseException, step: str) -> ToolResponse:
    """Build a failure response for an error caught inside a tool."""
    message = str(error) or "Unknown error"
    return ToolResponse(
        status="failure",
        data_for_agent={"error": message, "step": step},
        data_for_user=None,
    )


class BaseTool(ABC):
    """Base class for tools backed by an object with configuration and a logger."""

    name: str = ""
    description: str = ""
    parameters: Dict[str, str] = {}

    def __init__(self, logger: logging.Logger):
        """Initialize tool with a logger."""
        self.logger = logger

    @abstractmethod
    async def execute(self, parameters: Any) -> ToolResponse:
        """Execute the tool with the whole parameter object."""
        pass

    def _handle_error(self, error: Exception, step: str) -> ToolResponse:
        """Handle tool errors consistently."""
        self.logger.error(f"Error in {step}: {str(error)}")
        return create_error_response(error, step)

    def descriptor(self) -> ToolDescriptor:
        """Expose this tool to a registry."""
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            parameters=dict(self.parameters),
            execute=self.execute,
        )


class ToolRegistry:
    """Registry for managing and executing tools."""

    def __init__(self, logger: logging.Logger):
        """Initialize tool registry."""
        self.logger = logger
        self.tools: Dict[str, ToolDescriptor] = {}

    def register(self, tool: ToolDescriptor) -> None:
        """Register a tool; an existing tool with the same name is replaced."""
        if tool.name in self.tools:
            self.logger.warning(f"Tool '{tool.name}' is already registered, overwriting")
        self.tools[tool.name] = tool

    def register_tools(self, tools: Iterable[ToolDescriptor]) -> None:
        """Register several tools in order."""
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Optional[ToolDescriptor]:
        """Get a tool descriptor by name."""
        return self.tools.get(name)

    def list(self) -> List[ToolDescriptor]:
        """List registered tools in registration order."""
        return list(self.tools.values())

    def names(self) -> List[str]:
        """List registered tool names in registration order."""
        return list(self.tools.keys())

    async def execute(self, name: str, parameters: Any) -> ToolResponse:
        """Execute a tool by name.

        Errors raised by the tool itself propagate to the caller.
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        if not callable(tool.execute):
            raise ToolNotExecutableError(name)

        self.logger.info(f"Executing tool '{name}'")
        response = await tool.execute(parameters)
        if isinstance(response, dict):
            response = ToolResponse.model_validate(response)
        return response

    def get_tool_info(self, name: str) -> Dict[str, Any]:
        """Get information about a tool."""
        tool = self.get(name)
        if tool is None:
            return {"error": f"Tool '{name}' not found"}

        return {
            "name": tool.name,
            "description": tool.description,
            "parameters": dict(tool.parameters),
        }
