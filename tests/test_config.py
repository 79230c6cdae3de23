import logging
from datetime import timedelta

from prepwise.core.config import Config
from prepwise.core.logging import get_call_logger

def test_overrides_win_and_derive_session_lifetime(tmp_path):
    config = Config(DATA_DIR=str(tmp_path), SESSION_DURATION=60, VAPI_API_KEY="key")

    assert config.DATA_DIR == str(tmp_path)
    assert config.PERMANENT_SESSION_LIFETIME == timedelta(seconds=60)
    assert config.SESSION_COOKIE_HTTPONLY is True
    assert config.SESSION_COOKIE_SAMESITE == 'Lax'

def test_missing_vapi_key_fails_validation():
    config = Config(VAPI_API_KEY=None)

    assert config.missing_settings() == ['VAPI_API_KEY']
    assert config.validate() is False

def test_call_logger_prefixes_agent_id(caplog):
    log = get_call_logger("prepwise.agent.session_agent", "agent-7")

    with caplog.at_level(logging.INFO, logger="prepwise.agent.session_agent"):
        log.info("Call status INACTIVE -> CONNECTING")

    assert "[agent-7] Call status INACTIVE -> CONNECTING" in caplog.messages
