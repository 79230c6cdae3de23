from flask import Blueprint, request, session
import logging

from prepwise.api import get_services, require_user
from prepwise.core.async_runner import run_async_in_new_loop
from prepwise.core.response import APIResponse
from prepwise.core.validation import InputValidator

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)

@auth_bp.route('/api/auth/sign-up', methods=['POST'])
def sign_up():
    """Create an account"""
    try:
        if not request.is_json:
            return APIResponse.error("Request must be JSON", "validation_error", 400)

        data = InputValidator.validate_sign_up(request.get_json())
        result = run_async_in_new_loop(get_services().auth.sign_up(data['name'], data['email'], data['password']))

        return APIResponse.action_result(result, "sign_up_error", data={"redirect_to": "/sign-in"}, status_code=201)

    except Exception as e:
        logger.error(f"Sign-up error: {e}")
        return APIResponse.handle_exception(e)

@auth_bp.route('/api/auth/sign-in', methods=['POST'])
def sign_in():
    """Sign in and set the session cookie"""
    try:
        if not request.is_json:
            return APIResponse.error("Request must be JSON", "validation_error", 400)

        data = InputValidator.validate_sign_in(request.get_json())
        result = run_async_in_new_loop(get_services().auth.sign_in(data['email'], data['password']))

        if not result['success']:
            return APIResponse.action_result(result, "sign_in_error", 401)

        session.clear()
        session.permanent = True
        session['user_id'] = result['user_id']
        return APIResponse.action_result(result, "sign_in_error", 401, data={"redirect_to": "/"})

    except Exception as e:
        logger.error(f"Sign-in error: {e}")
        return APIResponse.handle_exception(e)

@auth_bp.route('/api/auth/sign-out', methods=['POST'])
def sign_out():
    session.clear()
    return APIResponse.success({"redirect_to": "/sign-in"}, "Signed out")

@auth_bp.route('/api/auth/me', methods=['GET'])
def me():
    """Get the signed-in user"""
    try:
        user = require_user()
        return APIResponse.success({"user": user})
    except Exception as e:
        return APIResponse.handle_exception(e)
