from datetime import datetime, timezone
from functools import wraps
from flask import request, jsonify, current_app, g
from werkzeug.exceptions import HTTPException
from src.security.auth import get_authenticated_uid
from src.security.errors import VerificationError
from src.utils.validators import validate_payload, CLAIM_SCHEMA
import logging

logger = logging.getLogger(__name__)


def get_services():
    return current_app.extensions['tester_verification']

def get_call_payload():
    """Unwrap the callable-function envelope ({"data": {...}}) if present"""
    body = request.get_json(silent=True)
    if isinstance(body, dict) and isinstance(body.get('data'), dict):
        return body['data']
    return body

def require_auth(f):
    """Reject callers without a verified Firebase identity"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        services = get_services()
        if services['require_auth']:
            g.uid = get_authenticated_uid(request, verifier=services['token_verifier'])
        else:
            g.uid = None
        return f(*args, **kwargs)
    return decorated_function

def configure_routes(app):

    @app.route('/health')
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'service': 'TesterVerification',
            'version': '1.0.0',
            'timestamp': datetime.now(timezone.utc).isoformat()
        }), 200

    @app.route('/logHeartbeat', methods=['POST'])
    @require_auth
    def log_heartbeat():
        payload = get_call_payload()
        result = get_services()['heartbeat'].process(payload)
        logger.info(
            f"Heartbeat from {payload['testerId']} in gig {payload['gigId']} "
            f"(caller {g.uid}): {result.to_dict()}"
        )
        return jsonify({'result': result.to_dict()})

    @app.route('/verifyClaimCode', methods=['POST'])
    @require_auth
    def verify_claim_code():
        payload = validate_payload(get_call_payload(), CLAIM_SCHEMA)
        binding = get_services()['claims'].redeem(
            payload['claimCode'],
            payload['installId'],
            payload['deviceId'],
            payload['packageName'],
            payload['isEmulator']
        )
        return jsonify({'result': {'success': True, **binding}})

    # Error handlers
    @app.errorhandler(VerificationError)
    def verification_error(e):
        logger.warning(f"{request.path} failed with {e.status}: {e.message}")
        return jsonify({'error': e.to_dict()}), e.http_status

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({'error': {'status': e.name.upper().replace(' ', '_'), 'message': e.description}}), e.code

    @app.errorhandler(Exception)
    def internal_error(e):
        logger.error(f"Unhandled error on {request.path}: {str(e)}", exc_info=True)
        return jsonify({'error': {'status': 'INTERNAL', 'message': 'Internal server error'}}), 500
