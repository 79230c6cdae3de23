from prepwise.services.interview_service import FALLBACK_QUESTIONS, InterviewService, get_random_interview_cover
from conftest import FakeLLM, run

def test_questions_parse_from_fenced_json(store):
    llm = FakeLLM(['```json\n["What is REST?", "Explain CORS."]\n```'])

    questions = run(InterviewService(store, llm).generate_questions("Backend", "Junior", "Flask", "technical", 5))

    assert questions == ["What is REST?", "Explain CORS."]

def test_malformed_array_falls_back_to_lines_without_punctuation():
    response = '[\n"What is REST?",\n  "Explain CORS."\n,\n]\nsorry, trailing text'

    questions = InterviewService._parse_questions(response)

    assert questions == ["What is REST?", "Explain CORS.", "sorry, trailing text"]

def test_numbered_lines_are_cleaned():
    assert InterviewService._parse_questions("1. What is REST?\n2. Explain CORS.\n\n") == ["What is REST?", "Explain CORS."]

def test_fallback_questions_without_llm(store):
    questions = run(InterviewService(store, FakeLLM(available=False)).generate_questions("Backend", "Junior", "Flask", "mixed", 4))

    assert questions == FALLBACK_QUESTIONS[:4]

def test_cover_image_path():
    assert get_random_interview_cover().startswith("/covers/")
