from flask import Blueprint, current_app
import asyncio
import logging

from prepwise.api import get_services, require_user
from prepwise.core.async_runner import run_async_in_new_loop
from prepwise.core.response import APIResponse
from prepwise.core.validation import InputValidator

interviews_bp = Blueprint('interviews', __name__)
logger = logging.getLogger(__name__)

@interviews_bp.route('/api/interviews', methods=['GET'])
def home():
    """The user's interview history and the latest interviews by others"""
    try:
        user = require_user()
        services = get_services()

        async def _load():
            return await asyncio.gather(
                services.interviews.get_interviews_by_user_id(user['id']),
                services.interviews.get_latest_interviews(user['id'], limit=current_app.config['LATEST_INTERVIEWS_LIMIT']),
            )

        user_interviews, latest_interviews = run_async_in_new_loop(_load())
        return APIResponse.success({
            "user": user,
            "user_interviews": user_interviews,
            "latest_interviews": latest_interviews,
            "has_past_interviews": len(user_interviews) > 0,
            "has_upcoming_interviews": len(latest_interviews) > 0
        })

    except Exception as e:
        logger.error(f"Home data error: {e}")
        return APIResponse.handle_exception(e)

@interviews_bp.route('/api/interviews/<interview_id>', methods=['GET'])
def get_interview(interview_id):
    """Get an interview together with the user's feedback for it, if any"""
    try:
        user = require_user()
        interview_id = InputValidator.validate_document_id(interview_id)
        services = get_services()

        interview = run_async_in_new_loop(services.interviews.get_interview_by_id(interview_id))
        if not interview:
            return APIResponse.not_found("Interview", interview_id)

        feedback = run_async_in_new_loop(services.feedback.get_feedback_by_interview_id(interview_id, user['id']))
        return APIResponse.success({"interview": interview, "feedback": feedback})

    except Exception as e:
        logger.error(f"Interview retrieval error: {e}")
        return APIResponse.handle_exception(e)

@interviews_bp.route('/api/interviews/<interview_id>/feedback', methods=['GET'])
def get_feedback(interview_id):
    """Get the user's feedback for an interview"""
    try:
        user = require_user()
        interview_id = InputValidator.validate_document_id(interview_id)
        services = get_services()

        interview = run_async_in_new_loop(services.interviews.get_interview_by_id(interview_id))
        if not interview:
            return APIResponse.not_found("Interview", interview_id)

        feedback = run_async_in_new_loop(services.feedback.get_feedback_by_interview_id(interview_id, user['id']))
        if not feedback:
            return APIResponse.not_found("Feedback", interview_id)

        return APIResponse.success({"interview": interview, "feedback": feedback})

    except Exception as e:
        logger.error(f"Feedback retrieval error: {e}")
        return APIResponse.handle_exception(e)
