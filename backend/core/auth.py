from functools import wraps

from flask import current_app, g, jsonify, request
from firebase_admin import auth

from core.logger import logger


def verify_firebase_token(token, app=None):
    """Verify a Firebase ID token and return its claims, or None if invalid"""
    try:
        return auth.verify_id_token(token, app=app)
    except auth.ExpiredIdTokenError:
        logger.info("Rejected expired Firebase ID token")
        return None
    except (auth.InvalidIdTokenError, ValueError) as e:
        logger.info(f"Rejected Firebase ID token: {type(e).__name__}")
        return None
    except auth.CertificateFetchError as e:
        logger.error(f"Could not fetch Firebase token certificates: {e}")
        return None


def require_auth(f):
    """Decorator to require a signed-in Firebase user (Bearer ID token)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            return jsonify({'error': 'Authorization header required'}), 401

        # Expecting "Bearer <token>" format
        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            return jsonify({'error': 'Invalid authorization format. Expected "Bearer <token>"'}), 401

        claims = verify_firebase_token(token.strip(), app=current_app.config.get('FIREBASE_APP'))
        if not claims:
            return jsonify({'error': 'Invalid or expired token'}), 401

        g.user = claims
        return f(*args, **kwargs)

    return decorated_function
