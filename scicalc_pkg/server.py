"""HTTP surface: a Flask app exposing the evaluator at POST /calculate."""

from __future__ import annotations

import time
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from .api import evaluate
from .config import CORS_ORIGINS, MAX_INPUT_LENGTH, SERVER_HOST, SERVER_PORT, VERSION
from .logging_config import evaluation_context, get_logger
from .types import AngleMode

logger = get_logger("server")


def create_app(config_overrides: dict[str, Any] | None = None) -> Flask:
    """Build the calculator app.

    Args:
        config_overrides: Extra Flask config values (e.g. ``{"TESTING": True}``)
    """
    app = Flask(__name__)
    app.config.update(
        CORS_ORIGINS=CORS_ORIGINS,
        # JSON envelope plus the longest accepted expression
        MAX_CONTENT_LENGTH=MAX_INPUT_LENGTH * 4 + 1024,
    )
    if config_overrides:
        app.config.update(config_overrides)

    CORS(app, origins=app.config["CORS_ORIGINS"])

    @app.route("/calculate", methods=["POST"])
    def calculate():
        """
        Evaluate a calculator expression.

        Request JSON:  {"expression": "8+4", "isRadians": true}
        Response JSON: {"result": "12"}  or  {"error": "..."} with status 400
        """
        start = time.perf_counter()
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        expression = payload.get("expression")
        if not isinstance(expression, str) or not expression.strip():
            return jsonify({"error": "Expression is required"}), 400

        # Only an explicit false switches to degrees
        is_radians = payload.get("isRadians", True) is not False

        outcome = evaluate(expression, is_radians=is_radians)
        context = evaluation_context(
            expression,
            angle_mode=AngleMode.from_is_radians(is_radians).value,
            error_code=outcome.error_code,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
        if not outcome.ok:
            logger.warning("Calculation failed: %s", outcome.error, extra=context)
            return jsonify({"error": outcome.error}), 400

        logger.info("Calculated %s", outcome.result, extra=context)
        return jsonify({"result": outcome.result})

    @app.errorhandler(413)
    def payload_too_large(_exc):
        return jsonify({"error": "Request body too large"}), 413

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "version": VERSION})

    return app


def run_server(host: str = SERVER_HOST, port: int = SERVER_PORT, debug: bool = False) -> None:
    """Serve the app with Flask's built-in server."""
    app = create_app()
    logger.info("Calculator backend listening at http://%s:%s", host, port)
    app.run(host=host, port=port, debug=debug)
