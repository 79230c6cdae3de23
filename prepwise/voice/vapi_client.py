import asyncio
import logging
import ssl
from typing import Any, Dict, List, Optional, Tuple, Union

import aiohttp

from prepwise.core.errors import VoiceSDKError
from prepwise.core.http_client import AsyncHTTPClient
from prepwise.voice.client import (
    CALL_END,
    CALL_START,
    ERROR,
    MESSAGE,
    SPEECH_END,
    SPEECH_START,
    VoiceClient,
)

logger = logging.getLogger(__name__)

SERVER_MESSAGES = ["status-update", "transcript", "speech-update", "end-of-call-report"]

def translate_server_message(message: Dict[str, Any]) -> List[Tuple[str, Any]]:
    """Map a Vapi server message onto the browser SDK's events.

    Returns a list of ``(event, payload)`` pairs, empty for message types the
    session agent does not care about.
    """
    message_type = message.get("type")

    if message_type == "status-update":
        status = message.get("status")
        if status == "in-progress":
            return [(CALL_START, None)]
        if status == "ended":
            events = []
            ended_reason = message.get("endedReason") or ""
            if "error" in ended_reason:
                events.append((ERROR, VoiceSDKError(f"Call ended with error: {ended_reason}", operation="call")))
            events.append((CALL_END, None))
            return events
        return []

    if message_type == "transcript":
        return [(MESSAGE, {
            "type": "transcript",
            "transcriptType": message.get("transcriptType"),
            "role": message.get("role"),
            "transcript": message.get("transcript", ""),
        })]

    if message_type == "speech-update" and message.get("role", "assistant") == "assistant":
        status = message.get("status")
        if status == "started":
            return [(SPEECH_START, None)]
        if status == "stopped":
            return [(SPEECH_END, None)]

    return []

class VapiClient(VoiceClient):
    """Vapi web-call client.

    ``start`` creates a web call through the REST API; the browser joins it
    with the returned ``webCallUrl``. Lifecycle events reach the server
    through the webhook and are fed in with ``dispatch_server_message``.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.vapi.ai",
                 server_url: Optional[str] = None, server_secret: Optional[str] = None,
                 timeout: int = 30, ssl_context: Optional[ssl.SSLContext] = None):
        super().__init__()
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.server_url = server_url
        self.server_secret = server_secret
        self.timeout = timeout
        self.ssl_context = ssl_context

    def _http_client(self) -> AsyncHTTPClient:
        return AsyncHTTPClient(
            timeout=self.timeout,
            ssl_context=self.ssl_context,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    def build_call_payload(self, assistant: Union[str, Dict[str, Any], None],
                           config: Optional[Dict[str, Any]] = None,
                           workflow: Optional[str] = None) -> Dict[str, Any]:
        overrides = dict(config or {})
        if self.server_url:
            server = {"url": self.server_url}
            if self.server_secret:
                server["secret"] = self.server_secret
            overrides["server"] = server
            overrides["serverMessages"] = SERVER_MESSAGES

        if workflow:
            return {"workflowId": workflow, "workflowOverrides": overrides}
        if isinstance(assistant, str):
            return {"assistantId": assistant, "assistantOverrides": overrides}
        if isinstance(assistant, dict):
            return {"assistant": assistant, "assistantOverrides": overrides}
        raise VoiceSDKError("An assistant or workflow is required to start a call", operation="start")

    async def start(self, assistant=None, config=None, workflow=None) -> Dict[str, Any]:
        if not self.api_key:
            raise VoiceSDKError("VAPI_API_KEY is not set", operation="start")

        payload = self.build_call_payload(assistant, config, workflow)
        try:
            async with self._http_client() as client:
                call = await client.post(f"{self.base_url}/call/web", json_data=payload)
        except aiohttp.ClientResponseError as e:
            raise VoiceSDKError(f"Vapi rejected the call ({e.status}): {e.message}", operation="start")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise VoiceSDKError(f"Could not reach Vapi: {e}", operation="start")

        self.call = call
        logger.info(f"Started Vapi call {self.call_id}")
        return call

    async def stop(self):
        if not self.call:
            logger.debug("No active call to stop")
            return

        control_url = (self.call.get("monitor") or {}).get("controlUrl")
        if not control_url:
            logger.warning(f"Call {self.call_id} has no control URL, cannot end it remotely")
            return

        try:
            async with self._http_client() as client:
                await client.post(control_url, json_data={"type": "end-call"})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise VoiceSDKError(f"Failed to end call {self.call_id}: {e}", operation="stop")
        logger.info(f"Requested end of Vapi call {self.call_id}")

    async def dispatch_server_message(self, message: Dict[str, Any]) -> List[str]:
        """Emit the SDK events that correspond to one server message."""
        emitted = []
        for event, payload in translate_server_message(message):
            if payload is None:
                await self.emit(event)
            else:
                await self.emit(event, payload)
            emitted.append(event)
        return emitted
