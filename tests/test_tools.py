"""
Test the tool registry.
"""

import logging
import pytest
from unittest.mock import Mock, AsyncMock

from swap_chat_agent.exceptions import ToolNotFoundError, ToolNotExecutableError
from swap_chat_agent.models import ToolResponse
from swap_chat_agent.tools import ToolDescriptor, ToolRegistry, create_error_response


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    return Mock(spec=logging.Logger)


@pytest.fixture
def registry(mock_logger):
    """Create an empty registry."""
    return ToolRegistry(mock_logger)


def make_tool(name, response=None):
    """Create a descriptor whose execute is an AsyncMock."""
    execute = AsyncMock(return_value=response or ToolResponse(status="success", data_for_agent={"tool": name}))
    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        parameters={"value": "string - a value"},
        execute=execute,
    )


class TestToolRegistry:
    """Test tool registry functionality."""

    def test_register_and_get(self, registry):
        """Registered tools can be looked up by name."""
        tool = make_tool("swap")
        registry.register(tool)

        assert registry.get("swap") is tool
        assert registry.get("missing") is None

    def test_list_preserves_registration_order(self, registry):
        """list() returns descriptors in registration order."""
        registry.register_tools([make_tool("b"), make_tool("a"), make_tool("c")])

        assert [tool.name for tool in registry.list()] == ["b", "a", "c"]
        assert registry.names() == ["b", "a", "c"]

    def test_reregistration_overwrites(self, registry, mock_logger):
        """Registering an existing name replaces the tool and logs a warning."""
        first = make_tool("swap")
        second = make_tool("swap")
        registry.register(first)
        registry.register(second)

        assert registry.get("swap") is second
        assert len(registry.list()) == 1
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_execute_passes_whole_parameter_object(self, registry):
        """execute() hands the full parameter object to the tool."""
        tool = make_tool("swap")
        registry.register(tool)
        params = {"value": "1", "other": {"nested": True}}

        response = await registry.execute("swap", params)

        tool.execute.assert_awaited_once_with(params)
        assert response.status == "success"
        assert response.data_for_agent == {"tool": "swap"}

    @pytest.mark.asyncio
    async def test_execute_tool_not_found(self, registry):
        """Unknown tools raise ToolNotFoundError."""
        with pytest.raises(ToolNotFoundError, match="Tool nonexistent not found"):
            await registry.execute("nonexistent", {})

    @pytest.mark.asyncio
    async def test_execute_not_executable(self, registry):
        """A descriptor without a callable execute raises ToolNotExecutableError."""
        registry.register(ToolDescriptor(name="broken", description="no execute"))

        with pytest.raises(ToolNotExecutableError, match="does not have an execute method"):
            await registry.execute("broken", {})

    @pytest.mark.asyncio
    async def test_execute_normalizes_dict_response(self, registry):
        """A plain dict returned by a tool becomes a ToolResponse."""
        execute = AsyncMock(return_value={"status": "failure", "dataForAgent": {"error": "x"}, "dataForUser": None})
        registry.register(ToolDescriptor(name="raw", description="raw", execute=execute))

        response = await registry.execute("raw", {})

        assert isinstance(response, ToolResponse)
        assert response.status == "failure"
        assert response.data_for_agent == {"error": "x"}
        assert response.data_for_user is None

    @pytest.mark.asyncio
    async def test_tool_exceptions_propagate(self, registry):
        """Exceptions raised by the tool itself are not swallowed."""
        execute = AsyncMock(side_effect=RuntimeError("boom"))
        registry.register(ToolDescriptor(name="explodes", description="raises", execute=execute))

        with pytest.raises(RuntimeError, match="boom"):
            await registry.execute("explodes", {})

    def test_get_tool_info(self, registry):
        """Tool info exposes name, description and parameters."""
        registry.register(make_tool("swap"))

        info = registry.get_tool_info("swap")

        assert info == {"name": "swap", "description": "swap tool", "parameters": {"value": "string - a value"}}
        assert "error" in registry.get_tool_info("missing")


class TestErrorResponse:
    """Test the failure response helper."""

    def test_create_error_response(self):
        """Errors become failure responses with no user data."""
        response = create_error_response(ValueError("Sell token FOO not supported"), "swap execution")

        assert response.status == "failure"
        assert response.data_for_agent == {"error": "Sell token FOO not supported", "step": "swap execution"}
        assert response.data_for_user is None

    def test_tool_response_aliases(self):
        """ToolResponse serializes with camelCase keys."""
        response = ToolResponse(status="success", data_for_agent={"a": 1}, data_for_user={"b": 2})

        assert response.model_dump(by_alias=True) == {
            "status": "success",
            "dataForAgent": {"a": 1},
            "dataForUser": {"b": 2},
        }

    def test_succeeded_property(self):
        """succeeded reflects the response status."""
        assert ToolResponse(status="success").succeeded
        assert not ToolResponse(status="failure", data_for_agent={"error": "x"}).succeeded
