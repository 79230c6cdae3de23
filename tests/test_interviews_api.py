import json
import uuid

from conftest import FEEDBACK_JSON, FakeLLM, run, sign_up_and_in

GENERATE_PAYLOAD = {
    "type": "technical",
    "role": "Backend Engineer",
    "level": "Senior",
    "techstack": "Python, Flask ,PostgreSQL",
    "amount": 3,
}

def add_interview(services, user_id, created_at, finalized=True, role="Frontend Developer"):
    return run(services.store.add("interviews", {
        "role": role,
        "type": "technical",
        "level": "Junior",
        "techstack": ["React"],
        "questions": ["What is the virtual DOM?"],
        "user_id": user_id,
        "finalized": finalized,
        "cover_image": "/covers/adobe.png",
        "created_at": created_at,
    }))

def test_home_requires_sign_in(client):
    response = client.get('/api/interviews')

    assert response.status_code == 401
    assert response.get_json()["type"] == "authentication_error"

def test_home_splits_own_and_latest_interviews(client, services, user):
    older = add_interview(services, user["id"], "2024-01-01T10:00:00")
    newer = add_interview(services, user["id"], "2024-02-01T10:00:00")
    others = add_interview(services, "someone-else", "2024-03-01T10:00:00")
    add_interview(services, "someone-else", "2024-04-01T10:00:00", finalized=False)

    data = client.get('/api/interviews').get_json()["data"]

    assert [i["id"] for i in data["user_interviews"]] == [newer, older]
    assert [i["id"] for i in data["latest_interviews"]] == [others]
    assert data["has_past_interviews"] is True
    assert data["has_upcoming_interviews"] is True
    assert data["user"]["id"] == user["id"]

def test_home_for_new_user_is_empty(client, user):
    data = client.get('/api/interviews').get_json()["data"]

    assert data["user_interviews"] == []
    assert data["has_past_interviews"] is False
    assert data["has_upcoming_interviews"] is False

def test_latest_interviews_are_limited(client, app, services, user):
    app.config['LATEST_INTERVIEWS_LIMIT'] = 2
    for day in range(1, 5):
        add_interview(services, "someone-else", f"2024-05-0{day}T09:00:00")

    data = client.get('/api/interviews').get_json()["data"]

    assert [i["created_at"] for i in data["latest_interviews"]] == ["2024-05-04T09:00:00", "2024-05-03T09:00:00"]

def test_interview_detail_and_feedback(client, services, user):
    interview_id = add_interview(services, user["id"], "2024-01-01T10:00:00")

    response = client.get(f'/api/interviews/{interview_id}')
    assert response.status_code == 200
    assert response.get_json()["data"]["feedback"] is None

    response = client.get(f'/api/interviews/{interview_id}/feedback')
    assert response.status_code == 404

    run(services.store.add("feedback", {**FEEDBACK_JSON, "interview_id": interview_id, "user_id": user["id"]}))

    data = client.get(f'/api/interviews/{interview_id}/feedback').get_json()["data"]
    assert data["interview"]["role"] == "Frontend Developer"
    assert data["feedback"]["total_score"] == 72

def test_feedback_belongs_to_the_signed_in_user(client, services, user):
    interview_id = add_interview(services, user["id"], "2024-01-01T10:00:00")
    run(services.store.add("feedback", {**FEEDBACK_JSON, "interview_id": interview_id, "user_id": user["id"]}))
    client.post('/api/auth/sign-out')
    sign_up_and_in(client, name="Grace Hopper", email="grace@example.com")

    response = client.get(f'/api/interviews/{interview_id}/feedback')

    assert response.status_code == 404

def test_missing_and_malformed_interview_ids(client, user):
    response = client.get(f'/api/interviews/{uuid.uuid4()}')
    assert response.status_code == 404

    response = client.get('/api/interviews/not-a-uuid')
    assert response.status_code == 400

def test_generate_ping(client):
    response = client.get('/api/vapi/generate')

    assert response.status_code == 200
    assert response.get_json()["data"] == "Thank you!"

def test_generate_creates_interview_from_llm_questions(client, services, fake_llm):
    fake_llm.queue(json.dumps(["Explain the GIL.", "What is WSGI?", "How do you index a table?", "Extra question"]))

    response = client.post('/api/vapi/generate', json={**GENERATE_PAYLOAD, "userid": "user-7"})

    assert response.status_code == 200
    interview_id = response.get_json()["data"]["interview_id"]
    interview = run(services.store.get("interviews", interview_id))
    assert interview["questions"] == ["Explain the GIL.", "What is WSGI?", "How do you index a table?"]
    assert interview["techstack"] == ["Python", "Flask", "PostgreSQL"]
    assert interview["user_id"] == "user-7"
    assert interview["finalized"] is True
    assert interview["cover_image"].startswith("/covers/")
    assert "Backend Engineer" in fake_llm.prompts[0]

def test_generate_uses_fallback_questions_without_llm(client, services):
    services.interviews.llm = FakeLLM(available=False)

    response = client.post('/api/vapi/generate', json={**GENERATE_PAYLOAD, "userid": "user-7"})

    interview_id = response.get_json()["data"]["interview_id"]
    assert len(run(services.store.get("interviews", interview_id))["questions"]) == 3

def test_generate_reports_llm_failure(client, fake_llm):
    fake_llm.queue(RuntimeError("rate limited"))

    response = client.post('/api/vapi/generate', json={**GENERATE_PAYLOAD, "userid": "user-7"})

    assert response.status_code == 500
    assert response.get_json()["type"] == "generation_error"

def test_generate_validates_payload(client):
    response = client.post('/api/vapi/generate', json={**GENERATE_PAYLOAD, "amount": 50, "userid": "user-7"})

    assert response.status_code == 400
