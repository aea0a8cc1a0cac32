"""
Common data models used across the swap chat agent.
"""

from enum import Enum
from typing import Dict, Any, Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ActionParseError


class Sender(str, Enum):
    """Author of a conversation turn."""
    USER = "user"
    AGENT = "agent"


_SENDER_ALIASES = {
    "user": Sender.USER,
    "human": Sender.USER,
    "agent": Sender.AGENT,
    "ai": Sender.AGENT,
    "ai_agent": Sender.AGENT,
    "assistant": Sender.AGENT,
}


class ConversationTurn(BaseModel):
    """One message of the chat history, oldest first."""
    model_config = ConfigDict(frozen=True)

    sender: Sender
    content: str

    @field_validator("sender", mode="before")
    @classmethod
    def _normalize_sender(cls, value: Any) -> Any:
        if isinstance(value, str):
            sender = _SENDER_ALIASES.get(value.strip().lower())
            if sender is None:
                raise ValueError(f"Unknown sender: {value}")
            return sender
        return value


class ToolResponse(BaseModel):
    """Normalized envelope returned by every tool."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: Literal["success", "failure"]
    data_for_agent: Dict[str, Any] = Field(default_factory=dict, alias="dataForAgent")
    data_for_user: Optional[Dict[str, Any]] = Field(default=None, alias="dataForUser")

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class ParsedAction(BaseModel):
    """A single tool invocation extracted from LLM output."""
    action_name: str
    parameters: Any = Field(default_factory=dict)
    reason: Optional[str] = None


class BlockError(BaseModel):
    """A block of LLM output that could not be turned into an action."""
    index: int
    block: str
    message: str


class ParseResult(BaseModel):
    """Outcome of parsing one LLM response."""
    actions: List[ParsedAction] = []
    response_to_user: Optional[str] = None
    errors: List[BlockError] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise if any block failed to parse."""
        if self.errors:
            summary = "; ".join(f"block {error.index}: {error.message}" for error in self.errors)
            raise ActionParseError(f"Failed to parse action response: {summary}", self.errors)


class ExecutionResult(BaseModel):
    """Result of one dispatched (or skipped) action."""
    action: str
    result: Any = None


class TurnResult(BaseModel):
    """Final result of one chat turn."""
    model_config = ConfigDict(populate_by_name=True)

    summarized_actions: str = Field(alias="summarizedActions")
    results_for_user: List[ExecutionResult] = Field(default_factory=list, alias="resultsForUser")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the chat UI expects."""
        return self.model_dump(by_alias=True)
