import json

import pytest

from prepwise.core.errors import FeedbackError
from prepwise.services.feedback_service import FEEDBACK_CATEGORIES, FeedbackService
from conftest import FEEDBACK_JSON, FakeLLM, feedback_response, run

TRANSCRIPT = [
    {"role": "assistant", "content": "Why do you want this role?"},
    {"role": "user", "content": "I enjoy building reliable backends."},
]

@pytest.fixture
def service(store):
    return FeedbackService(store, FakeLLM())

def test_format_transcript():
    assert FeedbackService.format_transcript(TRANSCRIPT) == (
        "- assistant: Why do you want this role?\n"
        "- user: I enjoy building reliable backends.\n"
    )

def test_create_feedback_stores_evaluation(service, store):
    service.llm.queue(feedback_response())

    result = run(service.create_feedback("iv-1", "user-1", TRANSCRIPT))

    assert result["success"] is True
    feedback = run(store.get("feedback", result["feedback_id"]))
    assert feedback["interview_id"] == "iv-1"
    assert feedback["user_id"] == "user-1"
    assert feedback["total_score"] == 72
    assert [c["name"] for c in feedback["category_scores"]] == [name for name, _ in FEEDBACK_CATEGORIES]
    assert feedback["areas_for_improvement"] == ["System design depth"]
    assert "created_at" in feedback

    prompt = service.llm.prompts[0]
    assert "- user: I enjoy building reliable backends." in prompt
    assert "**Cultural & Role Fit**" in prompt

def test_create_feedback_overwrites_existing_id(service, store):
    run(store.set("feedback", "fb-1", {"interview_id": "iv-1", "user_id": "user-1", "total_score": 10}))
    service.llm.queue(feedback_response())

    result = run(service.create_feedback("iv-1", "user-1", TRANSCRIPT, feedback_id="fb-1"))

    assert result == {"success": True, "feedback_id": "fb-1"}
    assert run(store.get("feedback", "fb-1"))["total_score"] == 72
    assert len(run(store.list("feedback"))) == 1

def test_lookup_by_interview_is_scoped_to_user(service, store):
    service.llm.queue(feedback_response())
    result = run(service.create_feedback("iv-1", "user-1", TRANSCRIPT))

    assert run(service.get_feedback_by_interview_id("iv-1", "user-1"))["id"] == result["feedback_id"]
    assert run(service.get_feedback_by_interview_id("iv-1", "user-2")) is None

def test_empty_transcript_skips_llm(service):
    assert run(service.create_feedback("iv-1", "user-1", [])) == {"success": False}
    assert service.llm.prompts == []

@pytest.mark.parametrize("response", [
    "I cannot score this interview.",
    json.dumps({**FEEDBACK_JSON, "category_scores": FEEDBACK_JSON["category_scores"][:4]}),
    json.dumps({**FEEDBACK_JSON, "total_score": 140}),
])
def test_invalid_evaluations_are_not_saved(service, store, response):
    service.llm.queue(response)

    assert run(service.create_feedback("iv-1", "user-1", TRANSCRIPT)) == {"success": False}
    assert run(store.list("feedback")) == []

def test_llm_failure_reports_failure(service):
    service.llm.queue(RuntimeError("upstream timeout"))

    assert run(service.create_feedback("iv-1", "user-1", TRANSCRIPT)) == {"success": False}

def test_parse_feedback_reorders_categories():
    shuffled = {**FEEDBACK_JSON, "category_scores": list(reversed(FEEDBACK_JSON["category_scores"]))}

    parsed = FeedbackService._parse_feedback(json.dumps(shuffled))

    assert parsed["category_scores"][0]["name"] == "Communication Skills"

def test_parse_feedback_rejects_unknown_category():
    categories = [dict(c) for c in FEEDBACK_JSON["category_scores"]]
    categories[2]["name"] = "Typing Speed"

    with pytest.raises(FeedbackError, match="Problem Solving"):
        FeedbackService._parse_feedback(json.dumps({**FEEDBACK_JSON, "category_scores": categories}))
