"""
Logging manager for the swap chat agent.

Every component logs through a child of the ``swap_chat_agent`` logger, which
owns the handlers. HTTP client libraries are capped at WARNING so request
chatter from the provider SDK and the aggregator session stays out of the log.
"""

import logging
from pathlib import Path
from typing import Dict, Any

from .config import Config


ROOT_LOGGER = "swap_chat_agent"
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "anthropic", "werkzeug")


class LoggingManager:
    """Configures the package logger and hands out component loggers."""

    def __init__(self, config: Config, console: bool = True):
        """Initialize the logging manager."""
        self.config = config
        self.console = console
        self.level = self._parse_level(config.logging.level)
        self._loggers: Dict[str, logging.Logger] = {}
        self._root = self._configure_root()

    @staticmethod
    def _parse_level(level: str) -> int:
        value = logging.getLevelName(level.upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level: {level}")
        return value

    def _configure_root(self) -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(self.level)
        root.propagate = False

        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

        # Handlers are attached once per process
        if root.handlers:
            return root

        log_file = Path(self.config.logging.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(self.level)
        file_handler.setFormatter(logging.Formatter(self.config.logging.format))
        root.addHandler(file_handler)

        if self.console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))
            root.addHandler(console_handler)

        return root

    def get_logger(self, name: str) -> logging.Logger:
        """Get the component logger ``swap_chat_agent.<name>``."""
        if name not in self._loggers:
            self._loggers[name] = self._root.getChild(name)
        return self._loggers[name]

    def update_log_level(self, level: str) -> None:
        """Change the level of the package logger and its file handler."""
        self.level = self._parse_level(level)
        self._root.setLevel(self.level)
        for handler in self._root.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.setLevel(self.level)

    def get_system_info(self) -> Dict[str, Any]:
        """Get logging system information."""
        return {
            "log_level": logging.getLevelName(self.level),
            "log_file": self.config.logging.file,
            "active_loggers": [logger.name for logger in self._loggers.values()],
        }
