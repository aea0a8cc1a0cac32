"""
Test the action and summarize agents.
"""

import logging
import pytest
from unittest.mock import Mock, AsyncMock

from langchain_core.messages import AIMessage

from swap_chat_agent.agents import ActionAgent, SummarizeAgent
from swap_chat_agent.config import LLMConfig
from swap_chat_agent.exceptions import AgentError
from swap_chat_agent.llm import LLMService
from swap_chat_agent.models import ConversationTurn, ExecutionResult, Sender, ToolResponse, TurnResult
from swap_chat_agent.tools import ToolDescriptor


SWAP_USER_DATA = {
    "calls": [
        {"to": "0xrouter", "data": "0xapprove", "value": "0"},
        {"to": "0xrouter", "data": "0xswap", "value": "0"},
    ],
    "metadata": {"sellAmount": "1", "sellToken": "ETH", "buyToken": "USDC", "buyAmount": "3000.0"},
}

SWAP_RESPONSE = (
    "ACTION 1:\n"
    "ACTION: swap\n"
    'PARAMETERS: {"sellTokenSymbol":"ETH","buyTokenSymbol":"USDC","sellAmount":1,'
    '"takerAddress":"0x1111111111111111111111111111111111111111"}\n'
    "REASON: user wants to swap"
)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    return Mock(spec=logging.Logger)


@pytest.fixture
def llm_config():
    """Create an LLM configuration for testing."""
    return LLMConfig(provider="anthropic", api_key="test-key", timeout=5)


def make_llm(llm_config, mock_logger, *responses):
    """Create an LLM service whose model answers with the given texts in order."""
    model = Mock()
    model.ainvoke = AsyncMock(side_effect=[AIMessage(content=text) for text in responses])
    return LLMService(llm_config, mock_logger, model=model)


def make_tool(name, response):
    """Create a tool descriptor backed by an AsyncMock."""
    return ToolDescriptor(
        name=name,
        description=f"{name} tool",
        parameters={"value": "string - a value"},
        execute=AsyncMock(return_value=response),
    )


@pytest.fixture
def summarize_agent(llm_config, mock_logger):
    """Create a summarize agent that always answers 'Summary'."""
    model = Mock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="Summary"))
    llm = LLMService(llm_config, mock_logger, model=model)
    return SummarizeAgent("Test Summarizer", "Your name : [Summarizer]", llm_config, mock_logger, llm=llm)


@pytest.fixture
def swap_tool():
    """Create a successful swap tool."""
    return make_tool("swap", ToolResponse(
        status="success",
        data_for_agent={"message": "Successfully constructed swap transaction for 1 ETH for USDC"},
        data_for_user=SWAP_USER_DATA,
    ))


def make_action_agent(llm_config, mock_logger, summarize_agent, tools, *responses, strict_parsing=True):
    return ActionAgent(
        "Test Constructor",
        "Your name : [Constructor]",
        tools,
        summarize_agent,
        llm_config,
        mock_logger,
        llm=make_llm(llm_config, mock_logger, *responses),
        strict_parsing=strict_parsing,
    )


class TestActionAgent:
    """Test action agent functionality."""

    @pytest.mark.asyncio
    async def test_swap_turn(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """A swap request dispatches the swap tool and surfaces its calls to the user."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool], SWAP_RESPONSE)

        result = await agent.execute("Swap 1 ETH for USDC", [])

        assert isinstance(result, TurnResult)
        assert result.summarized_actions == "Summary"
        assert len(result.results_for_user) == 1
        assert result.results_for_user[0].action == "swap"
        assert result.results_for_user[0].result == SWAP_USER_DATA
        swap_tool.execute.assert_awaited_once_with({
            "sellTokenSymbol": "ETH",
            "buyTokenSymbol": "USDC",
            "sellAmount": 1,
            "takerAddress": "0x1111111111111111111111111111111111111111",
        })

    @pytest.mark.asyncio
    async def test_payload_uses_camel_case(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """The turn result serializes with the keys the chat UI reads."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool], SWAP_RESPONSE)

        result = await agent.execute("Swap 1 ETH for USDC", [])
        payload = result.to_payload()

        assert set(payload) == {"summarizedActions", "resultsForUser"}
        assert payload["resultsForUser"][0] == {"action": "swap", "result": SWAP_USER_DATA}

    @pytest.mark.asyncio
    async def test_none_action_produces_no_user_results(self, llm_config, mock_logger, summarize_agent):
        """A NONE action reaches the summarizer with its reason and nothing for the user."""
        summarize_agent.execute = AsyncMock(return_value="Hi there")
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [],
                                  "ACTION 1:\nACTION: NONE\nREASON: Hello")

        result = await agent.execute("Hello", [])

        assert result.summarized_actions == "Hi there"
        assert result.results_for_user == []
        results_for_agent = summarize_agent.execute.call_args.args[0]
        assert results_for_agent == [ExecutionResult(action="NONE", result="Hello")]

    @pytest.mark.asyncio
    async def test_actions_dispatch_in_order(self, llm_config, mock_logger, summarize_agent):
        """Tools run sequentially in block order."""
        calls = []

        def recording_tool(name):
            async def execute(parameters):
                calls.append(name)
                return ToolResponse(status="success", data_for_agent={"tool": name})
            return ToolDescriptor(name=name, description=name, execute=execute)

        response = (
            "ACTION 1:\nACTION: second\nPARAMETERS: {}\nREASON: a\n"
            "ACTION 2:\nACTION: first\nPARAMETERS: {}\nREASON: b\n"
            "ACTION 3:\nACTION: second\nPARAMETERS: {}\nREASON: c\n"
        )
        agent = make_action_agent(llm_config, mock_logger, summarize_agent,
                                  [recording_tool("first"), recording_tool("second")], response)

        result = await agent.execute("do things", [])

        assert calls == ["second", "first", "second"]
        assert result.results_for_user == []

    @pytest.mark.asyncio
    async def test_failure_response_reaches_summarizer_only(self, llm_config, mock_logger, summarize_agent):
        """A failed tool keeps its error for the summarizer and adds nothing for the user."""
        failing = make_tool("swap", ToolResponse(
            status="failure",
            data_for_agent={"error": "Sell token FOO not supported", "step": "swap execution"},
        ))
        summarize_agent.execute = AsyncMock(return_value="FOO is not supported")
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [failing], SWAP_RESPONSE)

        result = await agent.execute("Swap FOO", [])

        assert result.results_for_user == []
        results_for_agent = summarize_agent.execute.call_args.args[0]
        assert results_for_agent[0].result["error"] == "Sell token FOO not supported"
        mock_logger.warning.assert_any_call("Action 'swap' failed: Sell token FOO not supported")

    @pytest.mark.asyncio
    async def test_unknown_tool_fails_the_turn(self, llm_config, mock_logger, summarize_agent):
        """An action naming an unregistered tool yields no result."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [],
                                  "ACTION: fly\nPARAMETERS: {}\nREASON: r")

        assert await agent.execute("fly me", []) is None
        mock_logger.error.assert_called()

    @pytest.mark.asyncio
    async def test_malformed_parameters_fail_the_turn(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """Invalid JSON parameters abort the turn before any tool runs."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool],
                                  "ACTION 1:\nACTION: swap\nPARAMETERS: {sellTokenSymbol: ETH}\nREASON: r")

        assert await agent.execute("swap", []) is None
        swap_tool.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lenient_parsing_reports_block_errors(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """Without strict parsing, good blocks run and bad ones are reported to the summarizer."""
        summarize_agent.execute = AsyncMock(return_value="Partially done")
        response = (
            "ACTION 1:\nACTION: swap\nPARAMETERS: {broken\nREASON: r\n"
            "ACTION 2:\nACTION: NONE\nREASON: still here\n"
        )
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool], response,
                                  strict_parsing=False)

        result = await agent.execute("swap", [])

        assert result.summarized_actions == "Partially done"
        results_for_agent = summarize_agent.execute.call_args.args[0]
        assert [r.action for r in results_for_agent] == ["NONE", "PARSE_ERROR"]
        swap_tool.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_llm_failure_returns_none(self, llm_config, mock_logger, summarize_agent):
        """A failing LLM call yields no result."""
        model = Mock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("provider down"))
        agent = ActionAgent("Test Constructor", "persona", [], summarize_agent, llm_config, mock_logger,
                            llm=LLMService(llm_config, mock_logger, model=model))

        assert await agent.execute("hello", []) is None

    @pytest.mark.asyncio
    async def test_missing_summary_becomes_empty_string(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """A failed summary still returns the user results."""
        summarize_agent.execute = AsyncMock(return_value=None)
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool], SWAP_RESPONSE)

        result = await agent.execute("swap", [])

        assert result.summarized_actions == ""
        assert len(result.results_for_user) == 1

    @pytest.mark.asyncio
    async def test_summarizer_receives_raw_response_text(self, llm_config, mock_logger, summarize_agent):
        """The action agent's full response text is handed to the summarizer."""
        summarize_agent.execute = AsyncMock(return_value="ok")
        text = "ACTION 1:\nACTION: NONE\nREASON: a\nACTION 2:\nACTION: SUMMARIZE\nREASON: Which token?"
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [], text)

        await agent.execute("swap", [])

        assert summarize_agent.execute.call_args.args[1] == text

    def test_generate_prompt_includes_history_and_tools(self, llm_config, mock_logger, summarize_agent, swap_tool):
        """The prompt lists numbered history turns and tool parameters."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [swap_tool])
        history = [
            ConversationTurn(sender=Sender.USER, content="I want USDC"),
            ConversationTurn(sender=Sender.AGENT, content="How much ETH?"),
        ]

        prompt = agent.generate_prompt(history, agent.tool_registry.list(), "1 ETH")

        assert "You are: Test Constructor." in prompt
        assert "1. user: I want USDC" in prompt
        assert "2. agent: How much ETH?" in prompt
        assert "swap: swap tool" in prompt
        assert "  - value: string - a value" in prompt
        assert "1 ETH" in prompt

    def test_generate_prompt_without_history(self, llm_config, mock_logger, summarize_agent):
        """An empty history is stated explicitly."""
        agent = make_action_agent(llm_config, mock_logger, summarize_agent, [])

        prompt = agent.generate_prompt([], [], "hi")

        assert "No previous conversation" in prompt

    def test_llm_init_failure_raises_agent_error(self, mock_logger):
        """Missing credentials surface as an AgentError at construction."""
        with pytest.raises(AgentError) as exc_info:
            SummarizeAgent("Broken", "persona", LLMConfig(api_key=""), mock_logger)

        assert exc_info.value.error_code == "LLM_INIT_ERROR"
        assert exc_info.value.agent_name == "Broken"


class TestSummarizeAgent:
    """Test summarize agent functionality."""

    @pytest.mark.asyncio
    async def test_execute_returns_text(self, summarize_agent):
        """The summary is the model's text content."""
        summary = await summarize_agent.execute([ExecutionResult(action="NONE", result="Hello")], "ACTION: NONE")

        assert summary == "Summary"

    @pytest.mark.asyncio
    async def test_execute_returns_none_on_failure(self, llm_config, mock_logger):
        """LLM failures produce no summary instead of raising."""
        model = Mock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("boom"))
        agent = SummarizeAgent("Summarizer", "persona", llm_config, mock_logger,
                               llm=LLMService(llm_config, mock_logger, model=model))

        assert await agent.execute([], None) is None

    def test_generate_prompt_formats_results(self, summarize_agent):
        """Each result is rendered as key: value lines under its action."""
        results = [ExecutionResult(action="swap", result={"message": "done", "buyAmount": "3000.0"})]

        prompt = summarize_agent.generate_prompt(results, "ACTION: swap")

        assert "You are Test Summarizer" in prompt
        assert "Action: swap" in prompt
        assert "message: done" in prompt
        assert "buyAmount: 3000.0" in prompt
        assert "ACTION: swap" in prompt
        assert "Do not suggest next steps" in prompt

    def test_generate_prompt_renders_missing_result_as_null(self, summarize_agent):
        """A NONE action without a reason shows up as null in the prompt."""
        prompt = summarize_agent.generate_prompt([ExecutionResult(action="NONE", result=None)], "ACTION: NONE")

        assert "Action: NONE" in prompt
        assert "Result:\n      null\n" in prompt
