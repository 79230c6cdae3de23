import logging
import os
import secrets
import ssl
from datetime import timedelta
from typing import List

logger = logging.getLogger(__name__)

def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))

def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))

def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]

class Config:
    """Settings read from the environment (``keys.env`` is loaded by the package).

    Keyword overrides win over the environment, which is how tests point the
    store and logs at a temporary directory. Uppercase attributes are copied
    into ``app.config`` by ``create_app``.
    """

    def __init__(self, **overrides):
        self._load_config()
        for key, value in overrides.items():
            setattr(self, key, value)
        self.PERMANENT_SESSION_LIFETIME = timedelta(seconds=self.SESSION_DURATION)
        self.TLS_SSL_CONTEXT = self.build_tls_context()
        self.validate()

    def _load_config(self):
        # Flask
        self.FLASK_ENV = os.getenv('FLASK_ENV', 'development')
        self.DEBUG = self.FLASK_ENV == 'development'
        self.TESTING = False
        self.SECRET_KEY = os.getenv('SECRET_KEY') or secrets.token_hex(32)  # sessions do not survive a restart

        # Session cookie: one week, HttpOnly, Lax, Secure only in production
        self.SESSION_DURATION = _env_int('SESSION_DURATION', 60 * 60 * 24 * 7)
        self.SESSION_COOKIE_NAME = 'session'
        self.SESSION_COOKIE_HTTPONLY = True
        self.SESSION_COOKIE_SECURE = self.FLASK_ENV == 'production'
        self.SESSION_COOKIE_SAMESITE = 'Lax'

        # Vapi
        self.VAPI_API_KEY = os.getenv('VAPI_API_KEY')
        self.VAPI_BASE_URL = os.getenv('VAPI_BASE_URL', 'https://api.vapi.ai')
        self.VAPI_ASSISTANT_ID = os.getenv('VAPI_ASSISTANT_ID')
        self.VAPI_WORKFLOW_ID = os.getenv('VAPI_WORKFLOW_ID')
        self.VAPI_SERVER_URL = os.getenv('VAPI_SERVER_URL')
        self.VAPI_WEBHOOK_SECRET = os.getenv('VAPI_WEBHOOK_SECRET')

        # LLM for question generation and feedback scoring
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.LLM_MODEL = os.getenv('LLM_MODEL', 'gpt-4o-mini')

        # Storage, outbound HTTP, logging
        self.DATA_DIR = os.getenv('DATA_DIR', 'data')
        self.HTTP_TIMEOUT = _env_int('HTTP_TIMEOUT', 30)
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')
        self.LOG_FILE = os.getenv('LOG_FILE', 'prepwise.log')
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_FILE_LEVEL = os.getenv('LOG_FILE_LEVEL', 'DEBUG')

        # Calls
        self.CALL_CONNECT_TIMEOUT = _env_float('CALL_CONNECT_TIMEOUT', 10)
        self.SESSION_TIMEOUT = _env_int('SESSION_TIMEOUT', 3600)  # registry keeps an agent at most this long
        self.LATEST_INTERVIEWS_LIMIT = _env_int('LATEST_INTERVIEWS_LIMIT', 20)

        if self.FLASK_ENV == 'production':
            self.CORS_ORIGINS = _env_list('CORS_ORIGINS_PROD', 'https://yourdomain.com')
        else:
            self.CORS_ORIGINS = _env_list('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5000')

    @staticmethod
    def build_tls_context() -> ssl.SSLContext:
        """TLS 1.2+ with certificate verification for calls to Vapi."""
        context = ssl.create_default_context()
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.check_hostname = True
        context.verify_mode = ssl.CERT_REQUIRED
        return context

    def missing_settings(self) -> List[str]:
        return [name for name in ('VAPI_API_KEY',) if not getattr(self, name)]

    def validate(self) -> bool:
        """Log what is missing; the app still starts so health checks can report it."""
        missing = self.missing_settings()
        if missing:
            logger.error(f"Missing required configuration: {', '.join(missing)}")

        if not (self.VAPI_WORKFLOW_ID or self.VAPI_ASSISTANT_ID):
            logger.warning("Neither VAPI_WORKFLOW_ID nor VAPI_ASSISTANT_ID is set - interview generation calls will fail")
        if not self.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY is not set - generic questions will be used and feedback cannot be scored")
        if not self.VAPI_SERVER_URL:
            logger.warning("VAPI_SERVER_URL is not set - call events will not reach /api/vapi/events")

        return not missing
