from typing import Optional, Dict, Any

class PrepwiseError(Exception):
    """Base exception for PrepWise application errors.

    ``error_type`` is the machine-readable ``type`` field of the JSON error
    envelope; ``payload`` becomes its ``details``.
    """
    error_type = "internal_error"

    def __init__(self, message: str, status_code: int = 500, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

class ValidationError(PrepwiseError):
    """Raised when input validation fails."""
    error_type = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, status_code=400, payload={'field': field} if field else None)

class AuthenticationError(PrepwiseError):
    """Raised when a request needs a signed-in user."""
    error_type = "authentication_error"

    def __init__(self, message: str = "Please log in to continue"):
        super().__init__(message, status_code=401)

class NotFoundError(PrepwiseError):
    """Raised when a document or call does not exist."""
    error_type = "not_found"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message += f": {resource_id}"
        super().__init__(message, status_code=404, payload={'resource': resource, 'resource_id': resource_id} if resource_id else None)

class CallStateError(PrepwiseError):
    """Raised when a call operation is not allowed in the current call status."""
    error_type = "call_state_error"

    def __init__(self, message: str, call_status: Optional[str] = None):
        super().__init__(message, status_code=409, payload={'call_status': call_status} if call_status else None)

class MediaPermissionError(PrepwiseError):
    """Raised when the browser did not grant microphone access."""
    error_type = "media_permission_error"

    def __init__(self, message: str = "Microphone access is required for the interview. Please grant permission and try again."):
        super().__init__(message, status_code=400)

class VoiceSDKError(PrepwiseError):
    """Raised when voice platform operations fail."""
    error_type = "voice_sdk_error"

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, status_code=502, payload={'operation': operation} if operation else None)

class FeedbackError(PrepwiseError):
    """Raised when feedback cannot be generated or parsed."""
    error_type = "feedback_error"

    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class StoreError(PrepwiseError):
    """Raised when the document store cannot be read or written."""
    error_type = "store_error"

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message, status_code=500, payload={'collection': collection} if collection else None)
