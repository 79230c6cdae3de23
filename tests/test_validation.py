import pytest

from prepwise.core.errors import ValidationError
from prepwise.core.validation import InputValidator

def test_sign_up_normalizes_email_and_strips_markup():
    data = InputValidator.validate_sign_up({
        "name": "  <b>Grace</b> Hopper ",
        "email": "Grace@Example.COM",
        "password": "cobol!!",
    })

    assert data == {"name": "Grace Hopper", "email": "grace@example.com", "password": "cobol!!"}

@pytest.mark.parametrize("payload, field", [
    ({"name": "Al", "email": "al@example.com", "password": "secret1"}, "name"),
    ({"name": "Alan", "email": "not-an-email", "password": "secret1"}, "email"),
    ({"name": "Alan", "email": "alan@example.com", "password": "123"}, "password"),
])
def test_sign_up_rejects_invalid_fields(payload, field):
    with pytest.raises(ValidationError) as exc:
        InputValidator.validate_sign_up(payload)
    assert exc.value.payload == {"field": field}

def test_sign_up_messages_match_form_rules():
    with pytest.raises(ValidationError, match="Name must be at least 3 characters"):
        InputValidator.validate_sign_up({"name": "Al", "email": "al@example.com", "password": "secret1"})
    with pytest.raises(ValidationError, match="Password must be at least 6 characters"):
        InputValidator.validate_sign_in({"email": "al@example.com", "password": "12345"})

def test_call_request_requires_interview_id_for_interviews():
    assert InputValidator.validate_call_request({"type": "generate"}) == {"type": "generate", "interview_id": None}

    with pytest.raises(ValidationError):
        InputValidator.validate_call_request({"type": "interview"})
    with pytest.raises(ValidationError):
        InputValidator.validate_call_request({"type": "chat"})

    interview_id = "0f8fad5b-d9cb-469f-a165-70867728950e"
    validated = InputValidator.validate_call_request({"type": "interview", "interview_id": interview_id})
    assert validated["interview_id"] == interview_id

def test_generate_request_bounds_amount():
    payload = {"type": "technical", "role": "Frontend", "level": "Junior",
               "techstack": "React,TypeScript", "amount": "5", "userid": "u1"}
    assert InputValidator.validate_generate_request(payload)["amount"] == 5

    with pytest.raises(ValidationError):
        InputValidator.validate_generate_request({**payload, "amount": 0})
    with pytest.raises(ValidationError):
        InputValidator.validate_generate_request({**payload, "amount": "many"})
    with pytest.raises(ValidationError):
        InputValidator.validate_generate_request({**payload, "role": " "})

def test_transcript_roles():
    transcript = [{"role": "assistant", "content": "Hi"}, {"role": "user", "content": "Hello"}]
    assert InputValidator.validate_transcript(transcript) == transcript

    with pytest.raises(ValidationError):
        InputValidator.validate_transcript([{"role": "narrator", "content": "..."}])
