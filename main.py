#!/usr/bin/env python3
"""Run the PrepWise API with Flask's threaded server.

Settings come from the environment or ``keys.env`` next to this file.
"""
import logging
import os
import sys

from prepwise.core.config import Config
from prepwise.core.logging import setup_logging

logger = logging.getLogger(__name__)

PLACEHOLDER_SETTINGS = ('VAPI_API_KEY', 'OPENAI_API_KEY', 'VAPI_WEBHOOK_SECRET', 'SECRET_KEY')

def check_environment(config: Config) -> bool:
    """Refuse to start without a Vapi key or with template values left in keys.env."""
    logger.info("🔍 Checking environment configuration...")

    missing = config.missing_settings()
    if missing:
        logger.error(f"❌ Missing critical settings: {', '.join(missing)}")
        return False

    placeholders = [
        name for name in PLACEHOLDER_SETTINGS
        if str(getattr(config, name, '') or '').startswith('your_')
    ]
    if placeholders:
        logger.error(f"❌ Placeholder values detected for: {', '.join(placeholders)}")
        return False

    logger.info("✅ Environment configuration check completed")
    return True

def main():
    config = Config()
    setup_logging(config)
    logger.info("🚀 Starting PrepWise...")

    if not check_environment(config):
        logger.error("❌ Environment check failed. Fix the settings above and try again.")
        return 1

    try:
        from prepwise import create_app
        app = create_app(config)

        if config.DEBUG:
            host, port = '127.0.0.1', 5000
            logger.info("🔧 Running in development mode")
        else:
            host, port = '0.0.0.0', int(os.getenv('PORT', 5000))
            logger.info("🚀 Running in production mode")

        logger.info(f"🌐 API will be available at http://{host}:{port}")
        logger.info("📞 Point the Vapi server URL at /api/vapi/events to receive call events")
        app.run(host=host, port=port, debug=config.DEBUG, threaded=True)
        return 0

    except KeyboardInterrupt:
        logger.info("⏹️ Application stopped by user")
        return 0

    except Exception as e:
        logger.error(f"💥 Unexpected error: {e}", exc_info=True)
        return 1

if __name__ == '__main__':
    sys.exit(main())
