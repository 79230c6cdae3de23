import re
from typing import Dict, Any, List
from prepwise.core.errors import ValidationError

AGENT_TYPES = ('generate', 'interview')
MESSAGE_ROLES = ('user', 'system', 'assistant')

class InputValidator:
    """Input validation and sanitization utilities."""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 1000, allow_html: bool = False) -> str:
        """Sanitize string input."""
        if not isinstance(value, str):
            raise ValidationError("Value must be a string")

        # Remove null bytes and control characters
        value = value.replace('\x00', '').strip()

        if not allow_html:
            value = re.sub(r'<[^>]+>', '', value)

        if len(value) > max_length:
            raise ValidationError(f"Value exceeds maximum length of {max_length} characters")

        return value

    @staticmethod
    def validate_email(email: str) -> str:
        """Validate and sanitize email address."""
        email = InputValidator.sanitize_string(email, max_length=254)

        # RFC 5322 compliant email regex (simplified)
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

        if not re.match(email_pattern, email):
            raise ValidationError("Please enter a valid email address", field='email')

        return email.lower()

    @staticmethod
    def validate_password(password: str) -> str:
        if not isinstance(password, str) or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters", field='password')
        if len(password) > 128:
            raise ValidationError("Password must be at most 128 characters", field='password')
        return password

    @staticmethod
    def validate_sign_up(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate sign-up payload: name, email and password."""
        if not isinstance(data, dict):
            raise ValidationError("Data must be a dictionary")

        name = InputValidator.sanitize_string(data.get('name') or '', max_length=100)
        if len(name) < 3:
            raise ValidationError("Name must be at least 3 characters", field='name')

        return {
            'name': name,
            'email': InputValidator.validate_email(data.get('email') or ''),
            'password': InputValidator.validate_password(data.get('password')),
        }

    @staticmethod
    def validate_sign_in(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate sign-in payload: email and password."""
        if not isinstance(data, dict):
            raise ValidationError("Data must be a dictionary")

        return {
            'email': InputValidator.validate_email(data.get('email') or ''),
            'password': InputValidator.validate_password(data.get('password')),
        }

    @staticmethod
    def validate_document_id(document_id: str, field: str = 'id') -> str:
        """Validate document ID format."""
        if not isinstance(document_id, str):
            raise ValidationError("Document ID must be a string", field=field)

        # UUID format validation
        uuid_pattern = r'^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$'
        if not re.match(uuid_pattern, document_id):
            raise ValidationError("Invalid document ID format", field=field)

        return document_id

    @staticmethod
    def validate_call_request(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a request to open a session agent."""
        if not isinstance(data, dict):
            raise ValidationError("Data must be a dictionary")

        agent_type = data.get('type')
        if agent_type not in AGENT_TYPES:
            raise ValidationError(f"Type must be one of: {', '.join(AGENT_TYPES)}", field='type')

        validated = {'type': agent_type, 'interview_id': None}
        if agent_type == 'interview':
            validated['interview_id'] = InputValidator.validate_document_id(data.get('interview_id'), field='interview_id')

        return validated

    @staticmethod
    def validate_generate_request(data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate the interview generation payload sent by the voice workflow."""
        if not isinstance(data, dict):
            raise ValidationError("Data must be a dictionary")

        validated = {}
        for field in ('type', 'role', 'level', 'techstack', 'userid'):
            value = data.get(field)
            if not value or not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Missing or invalid required field: {field}", field=field)
            validated[field] = InputValidator.sanitize_string(value, max_length=500)

        try:
            amount = int(data.get('amount'))
        except (TypeError, ValueError):
            raise ValidationError("Amount must be a number", field='amount')
        if amount < 1 or amount > 20:
            raise ValidationError("Amount must be between 1 and 20", field='amount')
        validated['amount'] = amount

        return validated

    @staticmethod
    def validate_transcript(transcript: Any) -> List[Dict[str, str]]:
        """Validate a list of {role, content} transcript entries."""
        if not isinstance(transcript, list):
            raise ValidationError("Transcript must be a list", field='transcript')

        validated = []
        for entry in transcript:
            if not isinstance(entry, dict):
                raise ValidationError("Transcript entries must be objects", field='transcript')
            role = entry.get('role')
            content = entry.get('content')
            if role not in MESSAGE_ROLES or not isinstance(content, str):
                raise ValidationError("Transcript entries need a valid role and content", field='transcript')
            validated.append({'role': role, 'content': content})
        return validated
