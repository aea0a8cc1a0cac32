"""
LLM provider selection and the chat-completion wrapper shared by the agents.
"""

import asyncio
import logging
from typing import Any, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models.chat_models import BaseChatModel

from .config import LLMConfig
from .exceptions import ConfigurationError, LLMError, UnsupportedProviderError


def get_llm(provider: str, api_key: str, model: str = "claude-3-5-sonnet-20241022",
            temperature: float = 0.0, max_tokens: int = 2048) -> BaseChatModel:
    """Create the chat model for the configured provider."""
    if not api_key:
        raise ConfigurationError("LLM API key is required", "MISSING_API_KEY")

    if str(provider).lower() == "anthropic":
        return ChatAnthropic(
            model=model,
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    raise UnsupportedProviderError(provider)


class LLMService:
    """Single string-prompt completion call with a per-call deadline."""

    def __init__(self, config: LLMConfig, logger: logging.Logger, model: Optional[BaseChatModel] = None):
        self.config = config
        self.logger = logger
        self.timeout = config.timeout
        self.model = model or get_llm(
            config.provider,
            config.api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    async def invoke(self, prompt: str) -> Any:
        """Send one prompt and return the assistant message."""
        try:
            return await asyncio.wait_for(self.model.ainvoke(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"LLM call timed out after {self.timeout}s")
            raise LLMError(f"LLM call timed out after {self.timeout}s", "LLM_TIMEOUT")
        except Exception as e:
            self.logger.error(f"LLM call failed: {str(e)}")
            raise LLMError("LLM call failed", "LLM_CALL_ERROR", {"original_error": str(e)})

    @staticmethod
    def extract_content(message: Any) -> str:
        """Flatten an assistant message into plain text.

        Content is either a string or a list of parts; a part is a string or
        exposes a ``text`` field.
        """
        content = getattr(message, "content", message)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict):
                    parts.append(str(item.get("text") or ""))
                elif hasattr(item, "text"):
                    parts.append(str(item.text or ""))
            return "".join(parts)
        return ""
