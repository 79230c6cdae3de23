import asyncio
import json
import uuid

import pytest

from prepwise import create_app
from prepwise.core.config import Config
from prepwise.services.document_store import DocumentStore
from prepwise.services.llm_service import LLMService
from prepwise.voice.vapi_client import VapiClient

FEEDBACK_JSON = {
    "total_score": 72,
    "category_scores": [
        {"name": "Communication Skills", "score": 80, "comment": "Clear and structured."},
        {"name": "Technical Knowledge", "score": 70, "comment": "Solid fundamentals."},
        {"name": "Problem Solving", "score": 65, "comment": "Needs more depth."},
        {"name": "Cultural & Role Fit", "score": 75, "comment": "Good alignment."},
        {"name": "Confidence & Clarity", "score": 70, "comment": "Mostly confident."},
    ],
    "strengths": ["Communication"],
    "areas_for_improvement": ["System design depth"],
    "final_assessment": "A promising candidate who should practice design questions.",
}

class FakeLLM(LLMService):
    """LLM double that replays queued responses."""

    def __init__(self, responses=None, available=True):
        super().__init__(api_key="test-key" if available else None)
        self.responses = list(responses or [])
        self.prompts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def complete(self, prompt, system_prompt=None):
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("No LLM response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

class FakeVapiClient(VapiClient):
    """Vapi client that never leaves the process."""

    def __init__(self, start_delay=0, start_error=None, stop_error=None):
        super().__init__(api_key="test-vapi-key")
        self.start_delay = start_delay
        self.start_error = start_error
        self.stop_error = stop_error
        self.started_with = None
        self.stop_calls = 0

    async def start(self, assistant=None, config=None, workflow=None):
        self.started_with = {"assistant": assistant, "config": config, "workflow": workflow}
        if self.start_delay:
            await asyncio.sleep(self.start_delay)
        if self.start_error:
            raise self.start_error
        self.call = {
            "id": str(uuid.uuid4()),
            "webCallUrl": "https://vapi.daily.co/test-room",
            "monitor": {"controlUrl": "https://phone-call-websocket.example/control"},
        }
        return self.call

    async def stop(self):
        self.stop_calls += 1
        if self.stop_error:
            raise self.stop_error

class FakeFeedbackService:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {"success": True, "feedback_id": "feedback-1"}
        self.error = error
        self.calls = []

    async def create_feedback(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.result

def run(coro):
    return asyncio.run(coro)

def server_message(call_id, **message):
    return {"message": {"call": {"id": call_id}, **message}}

@pytest.fixture
def store(tmp_path):
    return DocumentStore(str(tmp_path / "data"))

@pytest.fixture
def fake_llm():
    return FakeLLM()

@pytest.fixture
def voice_clients():
    return []

@pytest.fixture
def config(tmp_path):
    return Config(
        DATA_DIR=str(tmp_path / "data"),
        LOG_DIR=str(tmp_path / "logs"),
        TESTING=True,
        SECRET_KEY="test-secret",
        VAPI_API_KEY="test-vapi-key",
        VAPI_WORKFLOW_ID="workflow-123",
        VAPI_ASSISTANT_ID=None,
        VAPI_WEBHOOK_SECRET=None,
        OPENAI_API_KEY="test-key",
        CALL_CONNECT_TIMEOUT=0.5,
    )

@pytest.fixture
def app(config, fake_llm, voice_clients):
    app = create_app(config)
    services = app.extensions['prepwise']
    services.llm = fake_llm
    services.interviews.llm = fake_llm
    services.feedback.llm = fake_llm

    def voice_client_factory():
        client = FakeVapiClient()
        voice_clients.append(client)
        return client

    services.voice_client_factory = voice_client_factory
    return app

@pytest.fixture
def services(app):
    return app.extensions['prepwise']

@pytest.fixture
def client(app):
    return app.test_client()

def sign_up_and_in(client, name="Ada Lovelace", email="ada@example.com", password="secret123"):
    response = client.post('/api/auth/sign-up', json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.get_json()
    response = client.post('/api/auth/sign-in', json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return client.get('/api/auth/me').get_json()['data']['user']

@pytest.fixture
def user(client):
    return sign_up_and_in(client)

def feedback_response():
    return "```json\n" + json.dumps(FEEDBACK_JSON) + "\n```"
