from flask import Blueprint, request, current_app
import logging

from prepwise.agent.session_agent import AgentType, SessionAgent
from prepwise.api import get_services, require_user
from prepwise.core.async_runner import run_async_in_new_loop
from prepwise.core.errors import NotFoundError
from prepwise.core.response import APIResponse
from prepwise.core.validation import InputValidator

calls_bp = Blueprint('calls', __name__)
logger = logging.getLogger(__name__)

def _get_owned_agent(agent_id, user) -> SessionAgent:
    agent = get_services().calls.get(agent_id)
    if not agent or agent.user_id != user['id']:
        raise NotFoundError("Call", agent_id)
    return agent

@calls_bp.route('/api/calls', methods=['POST'])
def create_call():
    """Open a session agent for a generate or interview call"""
    try:
        user = require_user()
        if not request.is_json:
            return APIResponse.error("Request must be JSON", "validation_error", 400)

        data = InputValidator.validate_call_request(request.get_json())
        services = get_services()

        questions = []
        feedback_id = None
        if data['type'] == AgentType.INTERVIEW.value:
            interview = run_async_in_new_loop(services.interviews.get_interview_by_id(data['interview_id']))
            if not interview:
                return APIResponse.not_found("Interview", data['interview_id'])
            questions = interview.get('questions', [])
            feedback = run_async_in_new_loop(services.feedback.get_feedback_by_interview_id(interview['id'], user['id']))
            feedback_id = feedback['id'] if feedback else None

        agent = SessionAgent(
            services.voice_client_factory(),
            services.feedback,
            user_name=user['name'],
            user_id=user['id'],
            agent_type=AgentType(data['type']),
            interview_id=data['interview_id'],
            feedback_id=feedback_id,
            questions=questions,
            assistant_id=current_app.config.get('VAPI_ASSISTANT_ID'),
            workflow_id=current_app.config.get('VAPI_WORKFLOW_ID'),
            connect_timeout=current_app.config['CALL_CONNECT_TIMEOUT'],
        )
        services.calls.add(agent)

        return APIResponse.call(agent, "Call created", 201)

    except Exception as e:
        logger.error(f"Call creation error: {e}")
        return APIResponse.handle_exception(e)

@calls_bp.route('/api/calls/<agent_id>', methods=['GET'])
def get_call(agent_id):
    """Poll the call status, speaking indicator, transcript and redirect target"""
    try:
        user = require_user()
        agent = _get_owned_agent(agent_id, user)
        return APIResponse.call(agent)
    except Exception as e:
        return APIResponse.handle_exception(e)

@calls_bp.route('/api/calls/<agent_id>/start', methods=['POST'])
def start_call(agent_id):
    """Start the voice call once the browser has microphone access"""
    try:
        user = require_user()
        agent = _get_owned_agent(agent_id, user)
        data = request.get_json(silent=True) or {}

        run_async_in_new_loop(agent.handle_call(bool(data.get('microphone_granted'))))
        return APIResponse.call(agent, "Call started")

    except Exception as e:
        logger.error(f"Call start error: {e}")
        return APIResponse.handle_exception(e)

@calls_bp.route('/api/calls/<agent_id>/stop', methods=['POST'])
def stop_call(agent_id):
    """End the voice call"""
    try:
        user = require_user()
        agent = _get_owned_agent(agent_id, user)

        run_async_in_new_loop(agent.handle_disconnect())
        return APIResponse.call(agent, "Call ended")

    except Exception as e:
        logger.error(f"Call stop error: {e}")
        return APIResponse.handle_exception(e)

@calls_bp.route('/api/calls/<agent_id>', methods=['DELETE'])
def delete_call(agent_id):
    """Detach the agent's listeners and forget it"""
    try:
        user = require_user()
        agent = _get_owned_agent(agent_id, user)
        get_services().calls.remove(agent.agent_id)
        return APIResponse.success(message="Call removed")
    except Exception as e:
        return APIResponse.handle_exception(e)
