"""
Bearer-token user context.

Sign-in happens elsewhere; this module only issues and checks HS256 JWTs so
that every request carries an explicit user id.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import current_app, request, jsonify, g


def _secret() -> str:
    secret = os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_token(user_id: int, expires_in: int = None) -> str:
    """Issue a token for `user_id`. Lifetime defaults to JWT_ACCESS_TOKEN_EXPIRES (1 hour)."""
    if expires_in is None:
        expires_in = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600))
    now = datetime.now(timezone.utc)

    payload = {
        'user_id': user_id,
        'jti': secrets.token_hex(16),
        'exp': now + timedelta(seconds=expires_in),
        'iat': now,
    }
    return jwt.encode(payload, _secret(), algorithm='HS256')


def decode_token(token: str):
    """Decode and validate a token. Returns None when it is invalid or expired."""
    try:
        return jwt.decode(token, _secret(), algorithms=['HS256'])
    except jwt.InvalidTokenError:
        return None


def token_required(f):
    """Decorator to require a valid bearer token; sets g.user_id.

    Also rejects tokens whose user no longer exists.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return jsonify({'message': 'Missing authorization header'}), 401

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return jsonify({'message': 'Invalid authorization header format'}), 401

        payload = decode_token(parts[1])
        if not payload or not isinstance(payload.get('user_id'), int):
            return jsonify({'message': 'Invalid or expired token'}), 401

        from healthtrack import db
        from healthtrack.models.user import User
        if db.session.get(User, payload['user_id']) is None:
            return jsonify({'message': 'Unknown user'}), 401

        g.user_id = payload['user_id']
        g.token_jti = payload.get('jti')

        return current_app.ensure_sync(f)(*args, **kwargs)
    return wrapper
