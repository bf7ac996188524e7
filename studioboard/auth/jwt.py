"""JWT token generation and validation for studioboard."""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict
from dotenv import load_dotenv

from studioboard.models.actor import Actor

load_dotenv()

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))


def create_access_token(user_id: str, user_type: str = "user", role: Optional[str] = None, name: Optional[str] = None) -> str:
    """Create a JWT access token for a back-office user.

    Args:
        user_id: User ID to encode in token
        user_type: Account kind (user, customer, coworker, admin)
        role: Optional staff role (admin, manager, editor, ...)
        name: Optional display name

    Returns:
        Encoded JWT token string
    """
    payload = {
        "sub": user_id,
        "userId": user_id,
        "userType": user_type,
        "exp": datetime.utcnow() + timedelta(hours=JWT_EXPIRATION_HOURS),
        "iat": datetime.utcnow(),
    }
    if role:
        payload["role"] = role
    if name:
        payload["name"] = name
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload, or None if invalid or expired
    """
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def actor_from_token(token: str) -> Optional[Actor]:
    """Resolve the board actor a token speaks for.

    Returns:
        Actor, or None if the token is invalid, expired or carries no user id
    """
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        return Actor.from_claims(payload)
    except ValueError:
        return None
