import logging
from firebase_admin import auth
from src.security.errors import Unauthenticated

logger = logging.getLogger(__name__)


def verify_firebase_token(id_token, check_revoked=False):
    """Verify a Firebase ID token and return its decoded claims"""
    return auth.verify_id_token(id_token, check_revoked=check_revoked)

def get_authenticated_uid(request, verifier=None):
    """
    Resolve the caller's uid from the ``Authorization: Bearer`` header.
    Raises Unauthenticated when the header is missing or the token is rejected.
    """
    verifier = verifier or verify_firebase_token

    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        raise Unauthenticated("Authentication required")

    token = auth_header.split(' ', 1)[1].strip()
    if not token:
        raise Unauthenticated("Authentication required")

    try:
        claims = verifier(token)
    except (auth.InvalidIdTokenError, auth.UserDisabledError,
            auth.CertificateFetchError, ValueError) as e:
        logger.warning(f"ID token rejected: {str(e)}")
        raise Unauthenticated("Invalid authentication token") from e

    uid = (claims or {}).get('uid')
    if not uid:
        raise Unauthenticated("Invalid authentication token")
    return uid
