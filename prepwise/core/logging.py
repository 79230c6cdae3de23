import logging
import logging.handlers
import sys
import os
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

NOISY_LOGGERS = {
    'httpx': logging.WARNING,
    'aiohttp': logging.WARNING,
    'werkzeug': logging.WARNING,
    'livekit': logging.ERROR,
}

def _level(name, default):
    return getattr(logging, str(name or default).upper(), getattr(logging, default))

def setup_logging(config=None, level=None):
    """Send records to stdout and a rotating file under ``LOG_DIR``.

    Levels come from the config (``LOG_LEVEL`` for the console, ``LOG_FILE_LEVEL``
    for the file) and fall back to the environment when no config is passed,
    as happens when ``main.py`` logs before the app exists.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return root_logger

    def setting(name, default):
        return getattr(config, name, None) or os.getenv(name, default)

    level = level or _level(setting('LOG_LEVEL', 'INFO'), 'INFO')
    root_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root_logger.addHandler(console)

    log_dir = Path(setting('LOG_DIR', 'logs'))
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / setting('LOG_FILE', 'prepwise.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(_level(setting('LOG_FILE_LEVEL', 'DEBUG'), 'DEBUG'))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.warning(f"File logging disabled ({e}); logging to console only")

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)

    return root_logger

class CallLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every record with the session agent id, e.g. ``[3f2a...] Call status ...``."""

    def process(self, msg, kwargs):
        return f"[{self.extra['agent_id']}] {msg}", kwargs

def get_call_logger(name: str, agent_id: str) -> CallLoggerAdapter:
    return CallLoggerAdapter(logging.getLogger(name), {'agent_id': agent_id})
