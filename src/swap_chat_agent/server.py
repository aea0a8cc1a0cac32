"""
HTTP endpoint for the chat UI.

Flask handlers are synchronous while the turn workflow is async. All turns run
on one long-lived event loop owned by the app, so the LLM client's pooled
connections always belong to the loop that uses them.
"""

import asyncio
import threading
from typing import Any, Coroutine, Dict, Tuple
from flask import Flask, request, jsonify

from .exceptions import ValidationError
from .system import SwapChatSystem


class TurnRunner:
    """Runs coroutines on a dedicated event loop thread."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(target=self._run_loop, name="swap-agent-turns", daemon=True)
        self.thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def run(self, coroutine: Coroutine) -> Any:
        """Submit a coroutine and block until it finishes."""
        return asyncio.run_coroutine_threadsafe(coroutine, self.loop).result()

    def close(self) -> None:
        """Stop the loop and wait for its thread."""
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.thread.join()
        self.loop.close()


def read_turn_request(data: Any) -> Tuple[Any, Any]:
    """Extract message and history from a request body."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", "INVALID_BODY")
    return data.get('message'), data.get('conversationHistory')


def create_app(system: SwapChatSystem) -> Flask:
    """Create the Flask app around an already built system."""
    app = Flask(__name__)
    logger = system.logger
    runner = TurnRunner()
    app.extensions['turn_runner'] = runner

    @app.route('/api/agent', methods=['POST'])
    def agent_endpoint():
        try:
            message, history = read_turn_request(request.get_json(silent=True))
        except ValidationError as e:
            logger.warning(f"Rejected agent request: {e.message}")
            return jsonify({'error': e.message}), 400

        try:
            outcome: Dict[str, Any] = runner.run(system.process_message(message, history))
        except Exception as e:
            logger.error(f"Error processing agent request: {str(e)}")
            return jsonify({'error': str(e) or 'Unknown error'}), 500

        if not outcome['success']:
            status_code = outcome['status_code'] if outcome['status_code'] >= 400 else 500
            return jsonify({'error': outcome['error'] or 'Unknown error'}), status_code
        return jsonify({'result': outcome['result'].to_payload()})

    @app.route('/api/tools', methods=['GET'])
    def list_tools():
        registry = system.action_agent.tool_registry
        return jsonify({'tools': [registry.get_tool_info(name) for name in registry.names()]})

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    return app
