import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from prepwise.core.errors import FeedbackError, PrepwiseError
from prepwise.core.validation import InputValidator
from prepwise.services.document_store import DocumentStore
from prepwise.services.llm_service import LLMService

logger = logging.getLogger(__name__)

FEEDBACK = "feedback"

FEEDBACK_CATEGORIES = [
    ("Communication Skills", "Clarity, articulation, structured responses."),
    ("Technical Knowledge", "Understanding of key concepts for the role."),
    ("Problem Solving", "Ability to analyze problems and propose solutions."),
    ("Cultural & Role Fit", "Alignment with company values and job role."),
    ("Confidence & Clarity", "Confidence in responses, engagement, and clarity."),
]

SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories."
)

class FeedbackService:
    """Scores interview transcripts with the LLM and persists the feedback."""

    def __init__(self, store: DocumentStore, llm: LLMService):
        self.store = store
        self.llm = llm

    @staticmethod
    def format_transcript(transcript: List[Dict[str, str]]) -> str:
        return "".join(f"- {sentence['role']}: {sentence['content']}\n" for sentence in transcript)

    def _build_prompt(self, formatted_transcript: str) -> str:
        categories = "\n".join(f"- **{name}**: {description}" for name, description in FEEDBACK_CATEGORIES)
        return f"""You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.
Transcript:
{formatted_transcript}

Please score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
{categories}

Return ONLY a JSON object with keys:
total_score (integer 0-100),
category_scores (array of {{"name", "score", "comment"}} in the order above),
strengths (array of strings),
areas_for_improvement (array of strings),
final_assessment (string)
"""

    @staticmethod
    def _score(value: Any, field: str) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FeedbackError(f"Feedback field {field} must be a number")
        score = int(round(value))
        if score < 0 or score > 100:
            raise FeedbackError(f"Feedback field {field} must be between 0 and 100")
        return score

    @classmethod
    def _parse_feedback(cls, response_text: str) -> Dict[str, Any]:
        """Validate the LLM's structured evaluation."""
        try:
            parsed = LLMService.extract_json(response_text)
        except json.JSONDecodeError as e:
            raise FeedbackError(f"LLM feedback is not valid JSON: {e}")

        if not isinstance(parsed, dict):
            raise FeedbackError("LLM feedback must be a JSON object")

        raw_categories = parsed.get("category_scores")
        if not isinstance(raw_categories, list) or len(raw_categories) != len(FEEDBACK_CATEGORIES):
            raise FeedbackError(f"Feedback must score exactly {len(FEEDBACK_CATEGORIES)} categories")

        by_name = {c.get("name"): c for c in raw_categories if isinstance(c, dict)}
        category_scores = []
        for name, _ in FEEDBACK_CATEGORIES:
            category = by_name.get(name)
            if category is None:
                raise FeedbackError(f"Feedback is missing category: {name}")
            category_scores.append({
                "name": name,
                "score": cls._score(category.get("score"), name),
                "comment": str(category.get("comment", "")),
            })

        strengths = parsed.get("strengths", [])
        areas = parsed.get("areas_for_improvement", [])
        if not isinstance(strengths, list) or not isinstance(areas, list):
            raise FeedbackError("Strengths and areas for improvement must be lists")

        return {
            "total_score": cls._score(parsed.get("total_score"), "total_score"),
            "category_scores": category_scores,
            "strengths": [str(s) for s in strengths],
            "areas_for_improvement": [str(a) for a in areas],
            "final_assessment": str(parsed.get("final_assessment", "")),
        }

    async def create_feedback(self, interview_id: str, user_id: str,
                              transcript: List[Dict[str, str]],
                              feedback_id: Optional[str] = None) -> Dict[str, Any]:
        """Score a transcript and save it, overwriting ``feedback_id`` when given."""
        try:
            if not transcript:
                raise FeedbackError("Transcript is empty")

            transcript = InputValidator.validate_transcript(transcript)
            formatted_transcript = self.format_transcript(transcript)
            response_text = await self.llm.complete(self._build_prompt(formatted_transcript), system_prompt=SYSTEM_PROMPT)
            evaluation = self._parse_feedback(response_text)

            feedback = {
                "interview_id": interview_id,
                "user_id": user_id,
                **evaluation,
                "created_at": datetime.now().isoformat(),
            }

            if feedback_id:
                await self.store.set(FEEDBACK, feedback_id, feedback)
            else:
                feedback_id = await self.store.add(FEEDBACK, feedback)

            logger.info(f"Saved feedback {feedback_id} for interview {interview_id} (score {feedback['total_score']})")
            return {"success": True, "feedback_id": feedback_id}

        except PrepwiseError as e:
            logger.error(f"Error saving feedback: {e}")
            return {"success": False}
        except Exception as e:
            logger.error(f"Error saving feedback: {e}", exc_info=True)
            return {"success": False}

    async def get_feedback_by_interview_id(self, interview_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        feedback = await self.store.query(
            FEEDBACK,
            filters=[('interview_id', '==', interview_id), ('user_id', '==', user_id)],
            limit=1,
        )
        return feedback[0] if feedback else None
