"""
Workflow orchestrator for one chat turn, built on LangGraph.
"""

import logging
from typing import Any, Dict
from langgraph.graph import StateGraph, START, END

from .agents import ActionAgent
from .state import TurnState
from .validation import InputValidator


class WorkflowOrchestrator:
    """Handles the LangGraph workflow orchestration."""

    def __init__(self, action_agent: ActionAgent, validator: InputValidator, logger: logging.Logger):
        """Initialize the workflow orchestrator."""
        self.action_agent = action_agent
        self.validator = validator
        self.logger = logger

        # Build workflow
        self.workflow = self._build_workflow()

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(TurnState)

        workflow.add_node("validate_input", self._validate_input)
        workflow.add_node("run_action_agent", self._run_action_agent)
        workflow.add_node("format_response", self._format_response)
        workflow.add_node("handle_error", self._handle_error)

        workflow.add_edge(START, "validate_input")

        workflow.add_conditional_edges(
            "validate_input",
            self._validation_router,
            {
                "valid": "run_action_agent",
                "invalid": "handle_error"
            }
        )

        workflow.add_conditional_edges(
            "run_action_agent",
            self._agent_router,
            {
                "ok": "format_response",
                "error": "handle_error"
            }
        )

        workflow.add_edge("format_response", END)
        workflow.add_edge("handle_error", END)

        return workflow.compile()

    async def _validate_input(self, state: TurnState) -> Dict[str, Any]:
        """Validate the message and the conversation history."""
        try:
            message_result = self.validator.validate_message(state.message)
            if not message_result.is_valid:
                self.logger.warning(f"Input validation failed: {message_result.error_message}")
                return {"validation_result": message_result, "error": message_result.error_message, "status_code": 400}

            history_result = self.validator.validate_history(state.raw_history)
            if not history_result.is_valid:
                self.logger.warning(f"History validation failed: {history_result.error_message}")
                return {"validation_result": history_result, "error": history_result.error_message, "status_code": 400}

            self.logger.info("Input validation successful")
            return {
                "validation_result": message_result,
                "message": message_result.sanitized_input,
                "history": history_result.history,
            }

        except Exception as e:
            self.logger.error(f"Error in input validation: {str(e)}")
            return {"error": "Failed to validate input", "status_code": 500}

    async def _run_action_agent(self, state: TurnState) -> Dict[str, Any]:
        """Run the action agent for the turn."""
        try:
            result = await self.action_agent.execute(state.message, state.history)
        except Exception as e:
            self.logger.error(f"Error in action agent: {str(e)}")
            return {"error": "Failed to process message", "status_code": 500}

        if result is None:
            return {"error": "The agent could not process this request", "status_code": 502}
        return {"result": result}

    async def _format_response(self, state: TurnState) -> Dict[str, Any]:
        """Attach turn metadata."""
        result = state.result
        metadata = {
            "agent_used": self.action_agent.name,
            "history_turns": len(state.history),
            "user_results": len(result.results_for_user) if result else 0,
        }
        self.logger.info(f"Turn completed with {metadata['user_results']} result(s) for the user")
        return {"metadata": metadata, "status_code": 200}

    async def _handle_error(self, state: TurnState) -> Dict[str, Any]:
        """Record the error for the caller."""
        error_message = state.error or "An unexpected error occurred"
        self.logger.error(f"Workflow error handled: {error_message}")
        return {
            "error": error_message,
            "metadata": {"agent_used": "Error Handler", "error": error_message},
        }

    def _validation_router(self, state: TurnState) -> str:
        """Route based on validation result."""
        if state.error is None and state.validation_result and state.validation_result.is_valid:
            return "valid"
        return "invalid"

    def _agent_router(self, state: TurnState) -> str:
        """Route based on the agent outcome."""
        if state.error is None and state.result is not None:
            return "ok"
        return "error"

    async def process_message(self, message: Any, conversation_history: Any = None) -> Dict[str, Any]:
        """Process one chat turn through the workflow."""
        try:
            initial_state = TurnState(message=message if isinstance(message, str) else "", raw_history=conversation_history)
            result = await self.workflow.ainvoke(initial_state)

            # LangGraph returns the final state as a mapping
            if isinstance(result, dict):
                turn_result = result.get("result")
                error = result.get("error")
                status_code = result.get("status_code", 200)
                metadata = result.get("metadata", {})
            else:
                turn_result = getattr(result, "result", None)
                error = getattr(result, "error", None)
                status_code = getattr(result, "status_code", 200)
                metadata = getattr(result, "metadata", {})

            return {
                "success": error is None and turn_result is not None,
                "result": turn_result,
                "error": error,
                "status_code": status_code,
                "metadata": metadata,
            }

        except Exception as e:
            self.logger.error(f"Error in workflow processing: {str(e)}")
            return {
                "success": False,
                "result": None,
                "error": "Workflow processing failed",
                "status_code": 500,
                "metadata": {},
            }
