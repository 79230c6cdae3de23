"""
Voice Module

Real-time voice call clients:
- VoiceClient event surface (call-start, call-end, message, speech-start, speech-end, error)
- Vapi web calls and server-message translation
- Interviewer assistant definition
"""

from .client import VoiceClient, EVENTS
from .vapi_client import VapiClient, translate_server_message
from .interviewer import INTERVIEWER, format_questions

__all__ = [
    'VoiceClient',
    'EVENTS',
    'VapiClient',
    'translate_server_message',
    'INTERVIEWER',
    'format_questions'
]
