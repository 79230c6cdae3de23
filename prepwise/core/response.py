from flask import jsonify
from typing import Any, Dict, Optional
from prepwise.core.errors import AuthenticationError, NotFoundError, PrepwiseError, ValidationError

class APIResponse:
    """JSON envelopes shared by every endpoint.

    Success bodies look like ``{"success": true, "message", "status_code", "data"}``;
    error bodies carry ``error``, ``type`` and optional ``details`` instead of ``data``.
    """

    @staticmethod
    def success(data: Any = None, message: str = "", status_code: int = 200) -> tuple:
        body = {"success": True, "message": message, "status_code": status_code}
        if data is not None:
            body["data"] = data
        return jsonify(body), status_code

    @staticmethod
    def error(message: str, error_type: str = "internal_error", status_code: int = 500,
              details: Optional[Dict[str, Any]] = None) -> tuple:
        body = {"success": False, "error": message, "type": error_type, "status_code": status_code}
        if details:
            body["details"] = details
        return jsonify(body), status_code

    @staticmethod
    def handle_exception(e: Exception) -> tuple:
        """Render a PrepwiseError with its own status; anything else is a bare 500."""
        if isinstance(e, PrepwiseError):
            return APIResponse.error(e.message, e.error_type, e.status_code, e.payload)
        return APIResponse.error("An unexpected error occurred")

    @staticmethod
    def action_result(result: Dict[str, Any], error_type: str, error_status: int = 400,
                      data: Any = None, status_code: int = 200) -> tuple:
        """Render a ``{"success", "message"}`` server-action result."""
        if not result.get('success'):
            return APIResponse.error(result.get('message', ''), error_type, error_status)
        return APIResponse.success(data, result.get('message', ''), status_code)

    @staticmethod
    def call(agent, message: str = "", status_code: int = 200) -> tuple:
        """Render the current state of a session agent."""
        return APIResponse.success({"call": agent.snapshot()}, message, status_code)

    @staticmethod
    def validation_error(message: str, field: Optional[str] = None) -> tuple:
        return APIResponse.handle_exception(ValidationError(message, field))

    @staticmethod
    def not_found(resource: str, resource_id: Optional[str] = None) -> tuple:
        return APIResponse.handle_exception(NotFoundError(resource, resource_id))

    @staticmethod
    def unauthorized(message: str = "Please log in to continue") -> tuple:
        return APIResponse.handle_exception(AuthenticationError(message))
