import json
import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Optional

from prepwise.services.document_store import DocumentStore
from prepwise.services.llm_service import LLMService

logger = logging.getLogger(__name__)

INTERVIEWS = "interviews"

INTERVIEW_COVERS = [
    "/adobe.png",
    "/amazon.png",
    "/facebook.png",
    "/hostinger.png",
    "/pinterest.png",
    "/quora.png",
    "/reddit.png",
    "/skype.png",
    "/spotify.png",
    "/telegram.png",
    "/tiktok.png",
    "/yahoo.png",
]

FALLBACK_QUESTIONS = [
    "Can you walk me through your professional background and key experiences?",
    "What motivated you to apply for this position?",
    "Can you describe a challenging project you have worked on and how you handled it?",
    "How do you approach problem solving in your work?",
    "What are your greatest professional strengths?",
    "Can you tell me about a time when you had to learn something new quickly?",
    "How do you handle working under pressure or meeting tight deadlines?",
    "Describe your experience working in a team environment.",
    "What tools and technologies are you most proficient with?",
    "How do you stay current with industry trends and best practices?",
    "Can you discuss a situation where you received constructive feedback and how you responded?",
    "What are your career goals and how does this position align with them?",
    "How do you prioritize tasks when working on multiple projects?",
    "What do you consider to be your most significant professional achievement?",
    "How do you handle conflicts or disagreements in a professional setting?",
    "How do you approach documentation and knowledge sharing?",
    "Can you discuss your experience with stakeholder communication?",
    "What strategies do you use for continuous professional development?",
    "How do you decide when a piece of work is ready to ship?",
    "Why should we choose you for this role?",
]

def get_random_interview_cover() -> str:
    return f"/covers{random.choice(INTERVIEW_COVERS)}"

class InterviewService:
    """Service for interview generation and interview lookups."""

    def __init__(self, store: DocumentStore, llm: LLMService):
        self.store = store
        self.llm = llm

    async def generate_questions(self, role: str, level: str, techstack: str,
                                 focus: str, amount: int) -> List[str]:
        """Generate interview questions with the LLM, falling back to generic ones."""
        if not self.llm.available:
            logger.warning("LLM not available, using fallback questions")
            return self._generate_fallback_questions(amount)

        prompt = f"""Prepare questions for a job interview.
The job role is {role}.
The job experience level is {level}.
The tech stack used in the job is: {techstack}.
The focus between behavioural and technical questions should lean towards: {focus}.
The amount of questions required is: {amount}.
Please return only the questions, without any additional text.
The questions are going to be read by a voice assistant so do not use "/" or "*" or any other special characters which might break the voice assistant.
Return the questions formatted like this:
["Question 1", "Question 2", "Question 3"]
"""

        logger.info(f"Calling LLM API for {amount} questions")
        questions_text = await self.llm.complete(prompt)
        questions = self._parse_questions(questions_text)

        if not questions:
            raise ValueError("LLM response did not contain any questions")

        logger.info(f"Successfully parsed {len(questions)} questions from LLM response")
        return questions[:amount]

    @staticmethod
    def _parse_questions(response_text: str) -> List[str]:
        try:
            parsed = LLMService.extract_json(response_text)
        except json.JSONDecodeError:
            logger.warning("LLM response is not a JSON array, falling back to line parsing")
            parsed = [line.strip().lstrip('0123456789.-* ').strip(' []",') for line in response_text.splitlines()]

        if not isinstance(parsed, list):
            return []
        return [str(q).strip() for q in parsed if isinstance(q, str) and q.strip()]

    @staticmethod
    def _generate_fallback_questions(amount: int) -> List[str]:
        return FALLBACK_QUESTIONS[:amount]

    async def create_interview(self, interview_type: str, role: str, level: str,
                               techstack: str, amount: int, user_id: str) -> str:
        """Generate questions and persist a finalized interview."""
        questions = await self.generate_questions(role, level, techstack, interview_type, amount)

        interview = {
            "role": role,
            "type": interview_type,
            "level": level,
            "techstack": [t.strip() for t in techstack.split(",") if t.strip()],
            "questions": questions,
            "user_id": user_id,
            "finalized": True,
            "cover_image": get_random_interview_cover(),
            "created_at": datetime.now().isoformat(),
        }

        interview_id = await self.store.add(INTERVIEWS, interview)
        logger.info(f"Created interview {interview_id} for user {user_id} with {len(questions)} questions")
        return interview_id

    async def get_interview_by_id(self, interview_id: str) -> Optional[Dict[str, Any]]:
        return await self.store.get(INTERVIEWS, interview_id)

    async def get_interviews_by_user_id(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.store.query(
            INTERVIEWS,
            filters=[('user_id', '==', user_id)],
            order_by='created_at',
            descending=True,
        )

    async def get_latest_interviews(self, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Finalized interviews created by other users, newest first."""
        return await self.store.query(
            INTERVIEWS,
            filters=[('finalized', '==', True), ('user_id', '!=', user_id)],
            order_by='created_at',
            descending=True,
            limit=limit,
        )
