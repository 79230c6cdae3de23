import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

CALL_START = "call-start"
CALL_END = "call-end"
MESSAGE = "message"
SPEECH_START = "speech-start"
SPEECH_END = "speech-end"
ERROR = "error"

EVENTS = (CALL_START, CALL_END, MESSAGE, SPEECH_START, SPEECH_END, ERROR)

Handler = Callable[..., Any]

class VoiceClient:
    """Base class for real-time voice clients.

    Mirrors the browser SDK surface: ``on``/``off`` listener registration,
    ``start``/``stop`` for the call itself. Handlers may be plain functions or
    coroutine functions; ``emit`` awaits the latter in registration order.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Handler]] = defaultdict(list)
        self.call: Optional[Dict[str, Any]] = None

    @property
    def call_id(self) -> Optional[str]:
        return self.call.get("id") if self.call else None

    def on(self, event: str, handler: Handler):
        if event not in EVENTS:
            raise ValueError(f"Unknown voice event: {event}")
        self._listeners[event].append(handler)

    def off(self, event: str, handler: Handler):
        try:
            self._listeners[event].remove(handler)
        except ValueError:
            logger.debug(f"Handler for {event} was not registered")

    def listener_count(self, event: Optional[str] = None) -> int:
        if event:
            return len(self._listeners[event])
        return sum(len(handlers) for handlers in self._listeners.values())

    async def emit(self, event: str, *args):
        for handler in list(self._listeners[event]):
            result = handler(*args)
            if inspect.isawaitable(result):
                await result

    async def start(self, assistant: Union[str, Dict[str, Any], None] = None,
                    config: Optional[Dict[str, Any]] = None,
                    workflow: Optional[str] = None) -> Dict[str, Any]:
        raise NotImplementedError

    async def stop(self):
        raise NotImplementedError
