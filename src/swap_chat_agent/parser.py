"""
Parser for the ACTION / PARAMETERS / REASON response format.

The action agent asks the LLM to answer with numbered blocks::

    ACTION 1:
    ACTION: swap
    PARAMETERS: {"sellTokenSymbol": "ETH", ...}
    REASON: the user wants to swap

The parser is a small scanner over the normalized text. It never raises on
malformed input; blocks that cannot be decoded are reported in
``ParseResult.errors`` and it is up to the caller to decide whether they
abort the turn.
"""

import json
import logging
import string
from typing import Any, List, Optional

from .models import BlockError, ParseResult, ParsedAction


ACTION_KEYWORD = "ACTION"
ACTION_FIELD = "ACTION:"
PARAMETERS_FIELD = "PARAMETERS:"
REASON_FIELD = "REASON:"

SUMMARIZE_ACTION = "SUMMARIZE"
NONE_ACTION = "NONE"

IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")
HORIZONTAL_SPACE = " \t"

# Typographic characters LLMs like to emit, and the mojibake of an en dash.
_REPLACEMENTS = (
    ("\u00e2\u20ac\u201c", "-"),
    ("\u2013", "-"),
    ("\u2018", "'"),
    ("\u2019", "'"),
    ("\u201c", '"'),
    ("\u201d", '"'),
)


class ActionParser:
    """Split an LLM response into actions."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def normalize(text: str) -> str:
        """Replace typographic quotes and dashes, then trim."""
        for old, new in _REPLACEMENTS:
            text = text.replace(old, new)
        return text.strip()

    def parse(self, text: Optional[str]) -> ParseResult:
        """Parse a raw LLM response."""
        cleaned = self.normalize(text or "")
        result = ParseResult()

        for index, block in enumerate(split_blocks(cleaned)):
            action_name = scan_action_name(block)
            if action_name is None:
                self.logger.debug(f"Dropping block {index} without an action name")
                continue

            reason = scan_reason(block)
            if action_name == SUMMARIZE_ACTION:
                result.response_to_user = reason
                continue

            try:
                parameters = scan_parameters(block)
            except ValueError as e:
                self.logger.warning(f"Invalid parameters for action '{action_name}' in block {index}: {e}")
                result.errors.append(BlockError(index=index, block=block, message=f"{action_name}: {e}"))
                continue

            result.actions.append(ParsedAction(action_name=action_name, parameters=parameters, reason=reason))

        self.logger.info(f"Parsed {len(result.actions)} action(s), {len(result.errors)} block error(s)")
        return result


def _match_marker(text: str, start: int) -> Optional[int]:
    """Return the end of an ``ACTION <digits>:`` marker at ``start``, if any."""
    if not text.startswith(ACTION_KEYWORD, start):
        return None
    i = start + len(ACTION_KEYWORD)
    while i < len(text) and text[i] in HORIZONTAL_SPACE:
        i += 1
    digits_start = i
    while i < len(text) and text[i].isdigit():
        i += 1
    if i == digits_start:
        return None
    while i < len(text) and text[i] in HORIZONTAL_SPACE:
        i += 1
    if i < len(text) and text[i] == ":":
        return i + 1
    return None


def _starts_section(text: str, start: int) -> bool:
    """True when an ``ACTION:`` field or an ``ACTION <digits>:`` marker begins at ``start``."""
    if not text.startswith(ACTION_KEYWORD, start):
        return False
    i = start + len(ACTION_KEYWORD)
    while i < len(text) and text[i].isspace():
        i += 1
    while i < len(text) and text[i].isdigit():
        i += 1
    return i < len(text) and text[i] == ":"


def split_blocks(text: str) -> List[str]:
    """Split text on ``ACTION N:`` markers, dropping the markers and blank blocks.

    Text without any marker is returned as a single block.
    """
    blocks: List[str] = []
    segment_start = 0
    found_marker = False
    position = text.find(ACTION_KEYWORD)

    while position != -1:
        marker_end = _match_marker(text, position)
        if marker_end is None:
            position = text.find(ACTION_KEYWORD, position + 1)
            continue
        found_marker = True
        blocks.append(text[segment_start:position])
        segment_start = marker_end
        position = text.find(ACTION_KEYWORD, marker_end)
    blocks.append(text[segment_start:])

    blocks = [block for block in blocks if block.strip()]
    if not found_marker or not blocks:
        return [text]
    return blocks


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def scan_action_name(block: str) -> Optional[str]:
    """Identifier following the first ``ACTION:`` field that has one."""
    position = block.find(ACTION_FIELD)
    while position != -1:
        i = _skip_whitespace(block, position + len(ACTION_FIELD))
        start = i
        while i < len(block) and block[i] in IDENTIFIER_CHARS:
            i += 1
        if i > start:
            return block[start:i]
        position = block.find(ACTION_FIELD, position + 1)
    return None


def _scan_object(text: str, start: int) -> str:
    """Return the brace-balanced object starting at ``start``."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    raise ValueError("unterminated JSON object")


def scan_parameters(block: str) -> Any:
    """Decode the JSON object following ``PARAMETERS:``; ``{}`` when there is none.

    Raises ValueError when the object is present but not valid JSON.
    """
    position = block.find(PARAMETERS_FIELD)
    while position != -1:
        i = _skip_whitespace(block, position + len(PARAMETERS_FIELD))
        if i < len(block) and block[i] == "{":
            raw = _scan_object(block, i)
            try:
                return json.loads(raw)
            except json.JSONDecodeError as e:
                raise ValueError(f"invalid JSON parameters ({e.msg} at position {e.pos})") from e
        position = block.find(PARAMETERS_FIELD, position + 1)
    return {}


def scan_reason(block: str) -> Optional[str]:
    """Text after ``REASON:`` up to the block end or the next action section."""
    position = block.find(REASON_FIELD)
    if position == -1:
        return None
    start = _skip_whitespace(block, position + len(REASON_FIELD))
    end = len(block)
    candidate = block.find(ACTION_KEYWORD, start)
    while candidate != -1:
        if _starts_section(block, candidate):
            end = candidate
            break
        candidate = block.find(ACTION_KEYWORD, candidate + 1)
    return block[start:end].strip()
