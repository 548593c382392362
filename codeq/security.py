"""
CodeQ Backend - Password Hashing & Access Tokens
================================================

What:  bcrypt password hashing (passlib) and HS256 JWT bearer tokens
       (python-jose).
Who:   AuthService issues tokens; codeq.dependencies decodes them.

Token claims:
    sub   user id (UUID string)
    role  role at issue time (informational; the DB row is authoritative)
    exp   expiry, now + ACCESS_TOKEN_EXPIRE_MINUTES
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from codeq.config import settings
from codeq.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signs a bearer token for `user_id`."""
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Validates signature and expiry and returns the user id in `sub`.

    Raises:
        AuthenticationError: expired, tampered, or missing/garbled `sub`.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired")
    except JWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise AuthenticationError(message="Invalid token")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError(message="Invalid token")
    try:
        return uuid.UUID(subject)
    except ValueError:
        raise AuthenticationError(message="Invalid token")
