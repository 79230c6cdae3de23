import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)

def run_async_in_new_loop(coro, timeout: Optional[float] = None):
    """Run a coroutine to completion on a private event loop.

    Flask serves each request on a worker thread with no loop of its own, so
    every request gets a fresh loop that is closed before returning. Nothing
    created on it (HTTP sessions, LLM clients) may outlive the call.
    """
    if timeout:
        coro = asyncio.wait_for(coro, timeout=timeout)

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    except asyncio.TimeoutError:
        logger.error(f"Async operation timed out after {timeout} seconds")
        raise
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            loop.close()
