"""
Agents for the swap chat agent: the action agent that turns a chat message
into tool calls, and the summarize agent that reports on them.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from .config import LLMConfig
from .exceptions import AgentError
from .formatting import format_tool_response
from .llm import LLMService
from .models import ConversationTurn, ExecutionResult, ParseResult, ParsedAction, TurnResult
from .parser import ActionParser, NONE_ACTION
from .tools import ToolDescriptor, ToolRegistry


class BaseAgent:
    """Base class for prompt-driven agents."""

    def __init__(self, name: str, persona: str, config: LLMConfig, logger: logging.Logger,
                 llm: Optional[LLMService] = None):
        """Initialize base agent."""
        self.name = name
        self.persona = persona
        self.config = config
        self.logger = logger

        try:
            self.llm = llm or LLMService(config, logger)
        except Exception as e:
            raise AgentError(f"Failed to initialize LLM for {name}", self.name, "LLM_INIT_ERROR", {"original_error": str(e)})


class SummarizeAgent(BaseAgent):
    """Turns action results into a short answer for the user."""

    async def execute(self, results: Sequence[ExecutionResult], response_from_action_agent: Optional[str]) -> Optional[str]:
        """Summarize the results; returns None when the LLM call fails."""
        try:
            prompt = self.generate_prompt(results, response_from_action_agent)
            response = await self.llm.invoke(prompt)
            return self.llm.extract_content(response)
        except Exception as e:
            self.logger.error(f"Error processing summary in {self.name}: {str(e)}")
            return None

    def generate_prompt(self, results: Sequence[ExecutionResult], response_from_action_agent: Optional[str]) -> str:
        """Create the summarization prompt."""
        rendered_results = "\n".join(
            f"""
      Action: {result.action}
      Result:
      {format_tool_response(result.result)}
      """
            for result in results
        )

        return f"""
      You are {self.name} with the following personality:
      {self.persona}

      I have executed some actions and need to provide a user-friendly summary of the results.

      This is the response from the Transaction Constructor Agent:
      {response_from_action_agent or ""}

      Here are the results of the actions executed:
      {rendered_results}
      Provide a natural, informative summary.

      Important:
      - Be direct and concise
      - Don't use analogies or explanations
      - Don't mention internal agents or processes
      - If the Transaction Constructor Agent asked for information, state it directly
      - Do not suggest next steps
      - Focus only on summarizing what has happened
      - For successful actions, state what was done
      - For errors, state what's missing or what went wrong
      - Keep it professional but simple
      - Don't add your own questions
        """


class ActionAgent(BaseAgent):
    """Plans tool calls for a chat message, runs them and asks for a summary."""

    def __init__(self, name: str, persona: str, tools: Sequence[ToolDescriptor], summarize_agent: SummarizeAgent,
                 config: LLMConfig, logger: logging.Logger, llm: Optional[LLMService] = None,
                 strict_parsing: bool = True):
        """Initialize the action agent and register its tools."""
        super().__init__(name, persona, config, logger, llm)
        self.summarize_agent = summarize_agent
        self.strict_parsing = strict_parsing
        self.parser = ActionParser(logger)
        self.tool_registry = ToolRegistry(logger)
        self.tool_registry.register_tools(tools)

    async def execute(self, prompt: str, conversation_history: Sequence[ConversationTurn]) -> Optional[TurnResult]:
        """Run one turn. Returns None when anything in the turn fails."""
        try:
            self.logger.info(f"{self.name} processing message")
            full_prompt = self.generate_prompt(conversation_history, self.tool_registry.list(), prompt)
            response = await self.llm.invoke(full_prompt)
        except Exception as e:
            self.logger.error(f"Error generating actions in {self.name}: {str(e)}")
            return None

        return await self.process_response(response)

    def generate_prompt(self, chat_history: Sequence[ConversationTurn], tools: Sequence[ToolDescriptor],
                        user_prompt: str) -> str:
        """Create the action prompt with persona, history and tool catalog."""
        tool_descriptions = "\n".join(self._describe_tool(tool) for tool in tools)

        if chat_history:
            history = "\n".join(
                f"{index}. {turn.sender.value}: {turn.content}"
                for index, turn in enumerate(chat_history, 1)
            )
        else:
            history = "No previous conversation"

        return f"""
    You are: {self.name}.

    Your personality:
    {self.persona}

    User's question/request:
    {user_prompt}

    Here is your current context:
    Chat History:
    {history}

    Here are the tools available to you. You MUST use the exact tool names and parameter formats:
    {tool_descriptions}

    Compose your next action(s). You can specify multiple actions to be executed in sequence.
    For each action, structure your response like this:

    ACTION 1:
    ACTION: The exact name of the tool you want to use.
    PARAMETERS: A JSON object containing the exact parameters for the tool.
    REASON: Explain why you are using this tool.

    ACTION 2:
    ACTION: ...
    PARAMETERS: ...
    REASON: ...

    IMPORTANT:
    - You can ONLY use the tools listed above
    - You MUST follow the exact format provided
    - For general questions where no tool is needed, use ACTION: NONE and provide your answer in the REASON section
    - You MUST list ALL actions explicitly. DO NOT use placeholders like "[Actions 3-10 continue...]" or skip any actions.
    - If there are many similar actions (e.g., multiple swaps), you must still list each one individually with its complete ACTION, PARAMETERS, and REASON.
    - For actions related to tokens, if you can't find the token symbol from the user prompt and chat history, don't infer it. Ask the user for the token symbol.
    """

    @staticmethod
    def _describe_tool(tool: ToolDescriptor) -> str:
        lines = [f"{tool.name}: {tool.description}"]
        if tool.parameters:
            lines.append("Parameters:")
            lines.extend(f"  - {param}: {description}" for param, description in tool.parameters.items())
        else:
            lines.append("Parameters: None")
        return "\n".join(lines) + "\n"

    def parse_action(self, response: str) -> ParseResult:
        """Parse the LLM text into actions."""
        return self.parser.parse(response)

    async def process_response(self, response: Any) -> Optional[TurnResult]:
        """Parse, dispatch and summarize. Any failure yields None."""
        response_text = self.llm.extract_content(response)

        try:
            parsed = self.parse_action(response_text)
            if self.strict_parsing:
                parsed.raise_for_errors()

            results_for_agent, results_for_user = await self.dispatch(parsed.actions)

            for error in parsed.errors:
                results_for_agent.append(ExecutionResult(action="PARSE_ERROR", result={"error": error.message}))

            summary = await self.summarize_agent.execute(results_for_agent, response_text)
            return TurnResult(summarized_actions=summary or "", results_for_user=results_for_user)

        except Exception as e:
            self.logger.error(f"Error processing response in {self.name}: {str(e)}")
            return None

    async def dispatch(self, actions: Sequence[ParsedAction]) -> Tuple[List[ExecutionResult], List[ExecutionResult]]:
        """Execute actions one after another, in order."""
        results_for_agent: List[ExecutionResult] = []
        results_for_user: List[ExecutionResult] = []

        for action in actions:
            if action.action_name == NONE_ACTION:
                results_for_agent.append(ExecutionResult(action=NONE_ACTION, result=action.reason))
                continue

            response = await self.tool_registry.execute(action.action_name, action.parameters)
            if response.succeeded:
                self.logger.info(f"Action '{action.action_name}' succeeded")
            else:
                self.logger.warning(f"Action '{action.action_name}' failed: {response.data_for_agent.get('error')}")

            results_for_agent.append(ExecutionResult(action=action.action_name, result=response.data_for_agent))
            if response.data_for_user is not None:
                results_for_user.append(ExecutionResult(action=action.action_name, result=response.data_for_user))

        return results_for_agent, results_for_user
