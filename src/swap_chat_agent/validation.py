"""
Input validation for the swap chat agent.
"""

import re
import logging
from typing import Any, List, Optional
from pydantic import BaseModel, ValidationError as PydanticValidationError

from .config import Config
from .models import ConversationTurn


ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')


class ValidationResult(BaseModel):
    """Result of input validation."""
    is_valid: bool
    error_message: Optional[str] = None
    sanitized_input: Optional[str] = None
    history: List[ConversationTurn] = []


def is_valid_address(address: Any) -> bool:
    """Check for a 0x-prefixed 20-byte hex address."""
    return isinstance(address, str) and bool(ADDRESS_PATTERN.match(address))


class InputValidator:
    """Validates and sanitizes chat input."""

    def __init__(self, config: Config, logger: logging.Logger):
        """Initialize input validator."""
        self.config = config
        self.logger = logger
        self.max_length = config.validation.max_message_length
        self.min_length = config.validation.min_message_length
        self.max_history_turns = config.validation.max_history_turns
        self.history_window = config.agent.max_history

    def validate_message(self, message: Any) -> ValidationResult:
        """Validate and sanitize a user chat message."""
        if not isinstance(message, str) or not message.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Message cannot be empty"
            )

        sanitized = self._sanitize_input(message)

        if len(sanitized) < self.min_length:
            return ValidationResult(
                is_valid=False,
                error_message=f"Message must be at least {self.min_length} characters long"
            )

        if len(sanitized) > self.max_length:
            return ValidationResult(
                is_valid=False,
                error_message=f"Message cannot exceed {self.max_length} characters"
            )

        self.logger.info(f"Message validation successful: {len(sanitized)} characters")
        return ValidationResult(
            is_valid=True,
            sanitized_input=sanitized
        )

    def validate_history(self, history: Any) -> ValidationResult:
        """Validate the conversation history and keep the most recent turns."""
        if history is None:
            return ValidationResult(is_valid=True)

        if not isinstance(history, list):
            return ValidationResult(
                is_valid=False,
                error_message="Conversation history must be a list"
            )

        if len(history) > self.max_history_turns:
            return ValidationResult(
                is_valid=False,
                error_message=f"Conversation history cannot exceed {self.max_history_turns} turns"
            )

        try:
            turns = [
                turn if isinstance(turn, ConversationTurn) else ConversationTurn.model_validate(turn)
                for turn in history
            ]
        except PydanticValidationError as e:
            self.logger.warning(f"Invalid conversation history: {e.error_count()} error(s)")
            return ValidationResult(
                is_valid=False,
                error_message="Conversation history entries need a sender and content"
            )

        if self.history_window == 0:
            turns = []
        elif len(turns) > self.history_window:
            turns = turns[-self.history_window:]

        return ValidationResult(is_valid=True, history=turns)

    def _sanitize_input(self, message: str) -> str:
        """Remove control characters and trim."""
        sanitized = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]', '', message)
        return sanitized.strip()

