from dataclasses import dataclass
from typing import Callable

from prepwise.agent.registry import CallRegistry
from prepwise.services.auth_service import AuthService
from prepwise.services.document_store import DocumentStore
from prepwise.services.feedback_service import FeedbackService
from prepwise.services.interview_service import InterviewService
from prepwise.services.llm_service import LLMService
from prepwise.voice.client import VoiceClient
from prepwise.voice.vapi_client import VapiClient

@dataclass
class Services:
    """Service singletons shared by the blueprints of one app instance."""
    store: DocumentStore
    llm: LLMService
    auth: AuthService
    interviews: InterviewService
    feedback: FeedbackService
    calls: CallRegistry
    voice_client_factory: Callable[[], VoiceClient]

def build_services(config) -> Services:
    store = DocumentStore(config.DATA_DIR)
    llm = LLMService(api_key=config.OPENAI_API_KEY, model=config.LLM_MODEL)

    def voice_client_factory() -> VoiceClient:
        return VapiClient(
            api_key=config.VAPI_API_KEY,
            base_url=config.VAPI_BASE_URL,
            server_url=config.VAPI_SERVER_URL,
            server_secret=config.VAPI_WEBHOOK_SECRET,
            timeout=config.HTTP_TIMEOUT,
            ssl_context=config.TLS_SSL_CONTEXT,
        )

    return Services(
        store=store,
        llm=llm,
        auth=AuthService(store),
        interviews=InterviewService(store, llm),
        feedback=FeedbackService(store, llm),
        calls=CallRegistry(session_timeout=config.SESSION_TIMEOUT),
        voice_client_factory=voice_client_factory,
    )
