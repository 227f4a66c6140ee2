"""
Security utilities for access-token verification and trigger secrets.
"""
from typing import Optional
import hmac
from jose import JWTError, jwt
from app.core.config import settings


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decode and verify an access token issued by the identity provider.
    Returns the claims, or None when the token is invalid or expired.
    """
    if not settings.JWT_SECRET:
        return None
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            options=options,
        )
        return payload
    except JWTError:
        return None


def secrets_match(provided: Optional[str], expected: str) -> bool:
    """Constant-time comparison of a request header against a configured secret."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
