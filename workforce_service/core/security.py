"""Password hashing and signed tokens"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import secrets
import string

from jose import jwt as jose_jwt
from passlib.context import CryptContext

from shared.constants import TEMPORARY_PASSWORD_LENGTH
from .config import settings
import logging

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
CONFIRMATION_TOKEN_TYPE = "confirmation"

_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """Random password handed out with an invitation"""
    return "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))


def _encode(claims: Dict[str, Any], expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + expires_in
    return jose_jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = jose_jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jose_jwt.ExpiredSignatureError:
        logger.warning("JWT verification failed: token expired")
        raise ValueError('Token has expired')
    except jose_jwt.JWTError as e:
        logger.warning("JWT verification failed: %s", str(e))
        raise ValueError(f'Invalid token: {str(e)}')

    if payload.get("typ") != expected_type:
        raise ValueError("Invalid token: wrong token type")
    return payload


def generate_jwt_token(account_id: int, email: str, role: Optional[str]) -> str:
    """Generate an access token for an authenticated account"""
    claims = {
        "typ": ACCESS_TOKEN_TYPE,
        "sub": str(account_id),
        "email": email,
        "role": role,
    }
    return _encode(claims, timedelta(minutes=settings.jwt_expiry_minutes))


def verify_jwt_token(token: str) -> Dict[str, Any]:
    """Verify and decode an access token

    The role claim is informational only; authorization always reloads the
    account's current role from the database.
    """
    return _decode(token, ACCESS_TOKEN_TYPE)


def generate_confirmation_token(purpose: str, subject_id: int, actor_id: int) -> tuple[str, datetime]:
    """Short-lived token binding a confirmation to one subject and one actor"""
    ttl = timedelta(minutes=settings.activation_confirm_ttl_minutes)
    token = _encode(
        {
            "typ": CONFIRMATION_TOKEN_TYPE,
            "purpose": purpose,
            "sub": str(subject_id),
            "actor": str(actor_id),
            "nonce": secrets.token_urlsafe(8),
        },
        ttl,
    )
    return token, datetime.now(timezone.utc) + ttl


def verify_confirmation_token(token: str, purpose: str, subject_id: int, actor_id: int) -> None:
    """Raise ValueError unless the token confirms exactly this action"""
    payload = _decode(token, CONFIRMATION_TOKEN_TYPE)
    if payload.get("purpose") != purpose:
        raise ValueError("Confirmation token was issued for a different action")
    if payload.get("sub") != str(subject_id):
        raise ValueError("Confirmation token was issued for a different employee")
    if payload.get("actor") != str(actor_id):
        raise ValueError("Confirmation token was issued to a different user")
