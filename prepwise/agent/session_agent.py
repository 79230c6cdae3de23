import asyncio
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from prepwise.core.errors import CallStateError, MediaPermissionError, PrepwiseError, VoiceSDKError
from prepwise.core.logging import get_call_logger
from prepwise.voice.client import CALL_END, CALL_START, ERROR, MESSAGE, SPEECH_END, SPEECH_START, VoiceClient
from prepwise.voice.interviewer import INTERVIEWER, format_questions

class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"

class AgentType(str, Enum):
    GENERATE = "generate"
    INTERVIEW = "interview"

@dataclass
class SavedMessage:
    role: str
    content: str

class SessionAgent:
    """Drives one voice call from INACTIVE to FINISHED.

    The agent listens to the voice client's lifecycle events, keeps the final
    transcript lines, and once the call is finished either sends the user
    home (``generate``) or submits the transcript for feedback (``interview``).
    Where the browser should go next is exposed through ``redirect_to``.
    """

    def __init__(self, voice_client: VoiceClient, feedback_service, *,
                 user_name: str, user_id: str, agent_type: AgentType,
                 interview_id: Optional[str] = None, feedback_id: Optional[str] = None,
                 questions: Optional[List[str]] = None,
                 assistant_id: Optional[str] = None, workflow_id: Optional[str] = None,
                 connect_timeout: float = 10.0):
        self.agent_id = str(uuid.uuid4())
        self.log = get_call_logger(__name__, self.agent_id)
        self.voice_client = voice_client
        self.feedback_service = feedback_service
        self.user_name = user_name
        self.user_id = user_id
        self.agent_type = AgentType(agent_type)
        self.interview_id = interview_id
        self.feedback_id = feedback_id
        self.questions = questions or []
        self.assistant_id = assistant_id
        self.workflow_id = workflow_id
        self.connect_timeout = connect_timeout
        self.created_at = time.time()

        self.call_status = CallStatus.INACTIVE
        self.messages: List[SavedMessage] = []
        self.is_speaking = False
        self.last_message = ""
        self.redirect_to: Optional[str] = None
        self.error: Optional[str] = None

        self._lock = threading.Lock()
        self._attached = False
        self._handlers = {
            CALL_START: self.on_call_start,
            CALL_END: self.on_call_end,
            MESSAGE: self.on_message,
            SPEECH_START: self.on_speech_start,
            SPEECH_END: self.on_speech_end,
            ERROR: self.on_error,
        }

    # Listener registration

    def attach(self):
        if self._attached:
            return
        self.log.debug(f"Props - userName: {self.user_name}, userId: {self.user_id}, type: {self.agent_type.value}")
        self.log.debug(f"InterviewId: {self.interview_id}, feedbackId: {self.feedback_id}, questions: {len(self.questions)}")
        for event, handler in self._handlers.items():
            self.voice_client.on(event, handler)
        self._attached = True

    def detach(self):
        if not self._attached:
            return
        self.log.debug("Cleaning up event listeners")
        for event, handler in self._handlers.items():
            self.voice_client.off(event, handler)
        self._attached = False

    # State

    # Statuses each status may be entered from. FINISHED is terminal.
    TRANSITIONS = {
        CallStatus.CONNECTING: {CallStatus.INACTIVE},
        CallStatus.ACTIVE: {CallStatus.CONNECTING},
        CallStatus.INACTIVE: {CallStatus.CONNECTING},
        CallStatus.FINISHED: {CallStatus.INACTIVE, CallStatus.CONNECTING, CallStatus.ACTIVE},
    }

    def _set_status(self, status: CallStatus) -> bool:
        """Move to ``status`` if allowed from the current one; returns whether it moved."""
        with self._lock:
            return self._transition(status)

    def _transition(self, status: CallStatus) -> bool:
        if self.call_status not in self.TRANSITIONS[status]:
            if self.call_status != status:
                self.log.debug(f"Ignoring status change {self.call_status.value} -> {status.value}")
            return False
        self.log.info(f"Call status {self.call_status.value} -> {status.value}")
        self.call_status = status
        return True

    # Voice client events

    def on_call_start(self, *_):
        self.log.debug("Call started event received")
        self._set_status(CallStatus.ACTIVE)

    async def on_call_end(self, *_):
        self.log.debug("Call ended event received")
        if self._set_status(CallStatus.FINISHED):
            await self._on_call_finished()

    def on_message(self, message: Dict[str, Any]):
        self.log.debug(f"Message received - type: {message.get('type')}, transcriptType: {message.get('transcriptType')}")

        if message.get("type") == "transcript" and message.get("transcriptType") == "final":
            saved = SavedMessage(role=message.get("role"), content=message.get("transcript", ""))
            self.messages.append(saved)
            self.last_message = saved.content
            self.log.debug(f"Adding message to transcript: {saved.role} - {saved.content}")

    def on_speech_start(self, *_):
        self.is_speaking = True

    def on_speech_end(self, *_):
        self.is_speaking = False

    def on_error(self, error: Any):
        message = error.message if isinstance(error, PrepwiseError) else str(error)
        self.log.error(f"Voice SDK error: {message}")
        self.error = message

    # User actions

    def _call_arguments(self):
        """Return ``(assistant, config, workflow)`` for the voice client."""
        if self.agent_type == AgentType.GENERATE:
            config = {"variableValues": {"userName": self.user_name, "userid": self.user_id}}
            if self.workflow_id:
                return None, config, self.workflow_id
            if self.assistant_id:
                return self.assistant_id, config, None
            raise VoiceSDKError("VAPI_WORKFLOW_ID is not set", operation="start")

        if not self.questions:
            self.log.warning("No questions provided")
        config = {"variableValues": {"questions": format_questions(self.questions)}}
        return INTERVIEWER, config, None

    async def handle_call(self, microphone_granted: bool) -> Dict[str, Any]:
        self.log.info(f"Starting {self.agent_type.value} call")

        with self._lock:
            if self.call_status != CallStatus.INACTIVE:
                raise CallStateError(f"Cannot start a call while {self.call_status.value}", self.call_status.value)
            if not microphone_granted:
                error = MediaPermissionError()
                self.error = error.message
                raise error
            self._transition(CallStatus.CONNECTING)

        try:
            assistant, config, workflow = self._call_arguments()
            result = await asyncio.wait_for(
                self.voice_client.start(assistant, config, workflow=workflow),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError:
            self.log.warning("Connection timeout - resetting to inactive")
            self._set_status(CallStatus.INACTIVE)
            await self._end_orphaned_call()
            self.error = "Failed to start call: connection timed out"
            raise VoiceSDKError(self.error, operation="start")
        except Exception as e:
            self.log.error(f"Error starting call: {e}", exc_info=True)
            self._set_status(CallStatus.INACTIVE)
            detail = e.message if isinstance(e, PrepwiseError) else (str(e) or "Unhandled error. Check logs for details.")
            self.error = f"Failed to start call: {detail}"
            raise VoiceSDKError(self.error, operation="start") from e

        if self.call_status == CallStatus.FINISHED:
            # Disconnected while connecting; the stop then had no call to end.
            self.log.warning(f"Call {self.voice_client.call_id} started after disconnect - ending it")
            await self._end_orphaned_call()
            return result

        self.error = None
        self.log.info(f"Voice call started: {self.voice_client.call_id}")
        return result

    async def _end_orphaned_call(self):
        if not self.voice_client.call_id:
            self.log.warning("Call start was abandoned; any call Vapi created will end on its own timeout")
            return
        try:
            await self.voice_client.stop()
        except Exception as e:
            self.log.error(f"Error ending abandoned call {self.voice_client.call_id}: {e}")
        # Late webhooks for this call must not reach the agent.
        self.voice_client.call = None

    async def handle_disconnect(self):
        with self._lock:
            if self.call_status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
                raise CallStateError(f"Cannot end a call while {self.call_status.value}", self.call_status.value)
            self._transition(CallStatus.FINISHED)

        self.log.info("Disconnecting call")
        try:
            await self.voice_client.stop()
        except Exception as e:
            self.log.error(f"Error stopping call: {e}")

        await self._on_call_finished()

    # Completion

    async def _on_call_finished(self):
        self.log.info(f"Call finished - type: {self.agent_type.value}")
        if self.agent_type == AgentType.GENERATE:
            self.redirect_to = "/"
        else:
            await self.handle_generate_feedback(list(self.messages))

    async def handle_generate_feedback(self, messages: List[SavedMessage]):
        self.log.info(f"Starting feedback generation with {len(messages)} messages")

        try:
            result = await self.feedback_service.create_feedback(
                interview_id=self.interview_id,
                user_id=self.user_id,
                transcript=[asdict(m) for m in messages],
                feedback_id=self.feedback_id,
            )
        except Exception as e:
            self.log.error(f"Feedback generation error: {e}", exc_info=True)
            self.redirect_to = "/"
            return

        if result.get("success") and result.get("feedback_id"):
            self.feedback_id = result["feedback_id"]
            self.redirect_to = f"/interview/{self.interview_id}/feedback"
        else:
            self.log.error("Error saving feedback - redirecting to home")
            self.error = "Error saving feedback"
            self.redirect_to = "/"

    def snapshot(self) -> Dict[str, Any]:
        call = self.voice_client.call or {}
        return {
            "agent_id": self.agent_id,
            "type": self.agent_type.value,
            "user_name": self.user_name,
            "interview_id": self.interview_id,
            "feedback_id": self.feedback_id,
            "call_status": self.call_status.value,
            "is_speaking": self.is_speaking,
            "last_message": self.last_message,
            "message_count": len(self.messages),
            "messages": [asdict(m) for m in self.messages],
            "redirect_to": self.redirect_to,
            "error": self.error,
            "call_id": self.voice_client.call_id,
            "web_call_url": call.get("webCallUrl"),
        }
