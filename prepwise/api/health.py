from flask import Blueprint, jsonify, current_app
import datetime
from prepwise.api import get_services

health_bp = Blueprint('health', __name__)

@health_bp.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    services = get_services()
    return jsonify({
        "status": "healthy",
        "voice_configured": bool(current_app.config.get('VAPI_API_KEY')),
        "llm_available": services.llm.available,
        "active_calls": len(services.calls),
        "timestamp": datetime.datetime.now().isoformat()
    })
