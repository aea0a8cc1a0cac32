"""
Bounded in-memory chat history for interactive sessions.
"""

from typing import List

from .models import ConversationTurn, Sender


class ChatHistory:
    """Keeps the most recent turns of a conversation, oldest first."""

    def __init__(self, max_length: int = 10):
        self.max_length = max_length
        self._turns: List[ConversationTurn] = []

    def add(self, sender: Sender, content: str) -> None:
        self._turns.append(ConversationTurn(sender=sender, content=content))
        if len(self._turns) > self.max_length:
            self._turns = self._turns[len(self._turns) - self.max_length:]

    def get_history(self) -> List[ConversationTurn]:
        return list(self._turns)

    def clear(self) -> None:
        self._turns = []

    def __len__(self) -> int:
        return len(self._turns)
