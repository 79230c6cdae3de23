from flask import Blueprint, request, current_app
import hmac
import logging

from prepwise.api import get_services
from prepwise.core.async_runner import run_async_in_new_loop
from prepwise.core.errors import ValidationError
from prepwise.core.response import APIResponse
from prepwise.core.validation import InputValidator

vapi_bp = Blueprint('vapi', __name__)
logger = logging.getLogger(__name__)

@vapi_bp.route('/api/vapi/generate', methods=['GET'])
def generate_ping():
    return APIResponse.success("Thank you!")

@vapi_bp.route('/api/vapi/generate', methods=['POST'])
def generate_interview():
    """Workflow tool: generate and store an interview from the collected parameters"""
    try:
        data = InputValidator.validate_generate_request(request.get_json(silent=True))
    except ValidationError as e:
        return APIResponse.handle_exception(e)

    try:
        interview_id = run_async_in_new_loop(get_services().interviews.create_interview(
            interview_type=data['type'],
            role=data['role'],
            level=data['level'],
            techstack=data['techstack'],
            amount=data['amount'],
            user_id=data['userid'],
        ))
        return APIResponse.success({"interview_id": interview_id}, "Interview generated")

    except Exception as e:
        logger.error(f"Interview generation error: {e}", exc_info=True)
        return APIResponse.error(str(e) or "Interview generation failed", "generation_error", 500)

def _verify_secret() -> bool:
    secret = current_app.config.get('VAPI_WEBHOOK_SECRET')
    if not secret:
        return True
    provided = request.headers.get('X-Vapi-Secret', '')
    return hmac.compare_digest(provided, secret)

@vapi_bp.route('/api/vapi/events', methods=['POST'])
def server_events():
    """Vapi server-message webhook; forwards call lifecycle events to the owning agent"""
    if not _verify_secret():
        return APIResponse.unauthorized("Invalid webhook secret")

    payload = request.get_json(silent=True) or {}
    message = payload.get('message') or {}
    call_id = (message.get('call') or {}).get('id')
    if not call_id:
        return APIResponse.validation_error("Server message has no call id", "message.call.id")

    agent = get_services().calls.find_by_call_id(call_id)
    if not agent:
        logger.info(f"Ignoring {message.get('type')} for unknown call {call_id}")
        return APIResponse.success({"handled": False})

    try:
        emitted = run_async_in_new_loop(agent.voice_client.dispatch_server_message(message))
        return APIResponse.success({"handled": True, "events": emitted})
    except Exception as e:
        logger.error(f"Server message handling error for call {call_id}: {e}", exc_info=True)
        return APIResponse.handle_exception(e)
