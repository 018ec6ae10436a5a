"""
HTTP server exposing the generation handlers.

Handlers are mounted at POST /functions/v1/<name> so that existing clients of
the hosted edge functions can point at this server unchanged.
"""

from typing import Optional

from flask import Flask, request, jsonify

from cohortcraft import __version__
from cohortcraft.handlers import HANDLERS
from cohortcraft.store import get_store
from cohortcraft.store.base import RowStore
from cohortcraft.core.config import get_config_value
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

def create_app(store: Optional[RowStore] = None, api_token: Optional[str] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        store (RowStore, optional): Row store shared by all requests. Defaults to the configured store.
        api_token (str, optional): Bearer token required on every call. Defaults to server.api_token;
            no token means no check.

    Returns:
        Flask: The application
    """
    app = Flask(__name__)
    app.config["STORE"] = store or get_store()
    app.config["API_TOKEN"] = api_token or get_config_value("server.api_token")

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    @app.route("/")
    def health():
        return jsonify({"status": "ok", "version": __version__})

    @app.route("/functions/v1/<name>", methods=["POST", "OPTIONS"])
    def invoke(name):
        if request.method == "OPTIONS":
            return "", 200

        handler = HANDLERS.get(name)
        if handler is None:
            return jsonify({"error": f"Unknown function: {name}"}), 404

        token = app.config["API_TOKEN"]
        if token and request.headers.get("Authorization") != f"Bearer {token}":
            logger.warning(f"Rejected unauthorized call to {name}")
            return jsonify({"error": "Unauthorized"}), 401

        body = request.get_json(silent=True)
        if body is None:
            return jsonify({"error": "Invalid JSON body"}), 400

        logger.info(f"Invoking {name}")
        status, payload = handler(body, store=app.config["STORE"])
        return jsonify(payload), status

    logger.info("Created cohortcraft server app")
    return app
