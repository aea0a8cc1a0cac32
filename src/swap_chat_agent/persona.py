"""
Persona text for the agents, built from character JSON files.
"""

import json
from pathlib import Path
from typing import Any, Dict

from .exceptions import ConfigurationError


LIST_SECTIONS = ("lore", "objectives", "knowledge", "messageExamples", "postExamples")


def create_context_from_json(data: Dict[str, Any]) -> str:
    """Render a character definition as the persona block of a prompt."""
    if not data:
        raise ConfigurationError("Error while trying to parse the agent persona definition", "INVALID_PERSONA")

    parts = []
    if data.get("name"):
        parts.append(f"Your name : [{data['name']}]")
    if data.get("bio"):
        parts.append(f"Your Bio : [{data['bio']}]")

    for section in LIST_SECTIONS:
        values = data.get(section)
        if isinstance(values, list):
            joined = "]\n[".join(str(value) for value in values)
            parts.append(f"Your {section} : [{joined}]")

    return "\n".join(parts)


def load_persona(path: str) -> str:
    """Load a persona JSON file and render it."""
    persona_file = Path(path)
    try:
        with open(persona_file, "r", encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to load persona from {path}: {str(e)}", "INVALID_PERSONA")
    return create_context_from_json(data)
