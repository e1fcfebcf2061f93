import logging

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError


logger = logging.getLogger(__name__)


def _identity_email():
    identity = get_jwt_identity()
    if not isinstance(identity, str) or not identity.strip():
        return None
    return identity.strip()


def resolve_session_email():
    """Email of the authenticated caller, or None for anonymous requests.

    A present but invalid or expired token is rejected by the JWT manager's
    error loaders before this returns.
    """
    verify_jwt_in_request(optional=True)
    return _identity_email()


def resolve_viewer_email():
    """Like ``resolve_session_email`` but an unusable token means anonymous."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as e:
        logger.info("Ignoring unusable session token: %s", e)
        return None
    return _identity_email()
