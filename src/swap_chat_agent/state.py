"""
State model for the chat turn workflow.
"""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel

from .models import ConversationTurn, TurnResult
from .validation import ValidationResult


class TurnState(BaseModel):
    """State of one chat turn."""
    message: str
    raw_history: Any = None
    history: List[ConversationTurn] = []
    validation_result: Optional[ValidationResult] = None
    result: Optional[TurnResult] = None
    error: Optional[str] = None
    status_code: int = 200
    metadata: Dict[str, Any] = {}
