from flask import Flask, jsonify
from flask_cors import CORS
import logging
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from keys.env
dotenv_path = Path(__file__).parent.parent / 'keys.env'
load_dotenv(dotenv_path=dotenv_path)
from prepwise.core.config import Config
from prepwise.core.logging import setup_logging
from prepwise.core.response import APIResponse
from prepwise.services import build_services

logger = logging.getLogger(__name__)

def create_app(config=None):
    """Application factory for Flask app."""
    if config is None:
        config = Config()
    setup_logging(config)

    app = Flask(__name__)
    app.config.from_object(config)

    # Allow credentials so the session cookie travels with API calls
    if config.FLASK_ENV == 'production':
        CORS(app, resources={r"/api/*": {"origins": config.CORS_ORIGINS[0]}}, supports_credentials=True)
    else:
        CORS(app, resources={r"/api/*": {"origins": config.CORS_ORIGINS}}, supports_credentials=True)

    app.extensions['prepwise'] = build_services(config)

    from prepwise.api import register_routes
    register_routes(app)

    @app.route('/')
    def index():
        return jsonify({"name": "PrepWise API", "health": "/api/health"})

    @app.errorhandler(404)
    def not_found(error):
        return APIResponse.error("Endpoint not found", "not_found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return APIResponse.error("Method not allowed", "method_not_allowed", 405)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return APIResponse.error("Internal server error", "internal_error", 500)

    return app
