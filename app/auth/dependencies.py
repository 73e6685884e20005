# =============================================================================
# app/auth/dependencies.py - Access Token Verification
# =============================================================================
# Verifies Supabase access tokens and exposes the token subject as an
# AuthUser. Profile loading and role checks build on top of this in
# app/auth/session.py.
#
# Supports both:
# - ES256 (Supabase JWT signing keys) via the project's JWKS endpoint
# - HS256 (legacy Supabase JWT secret), only when SUPABASE_JWT_SECRET is set
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/token-only")
#   async def token_only(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# HTTP Bearer token extractors
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # 1 hour
TOKEN_AUDIENCE = "authenticated"


class JWKSCache:
    """
    In-process cache of the Supabase JWKS document.

    A stale document is served when a refresh fails, so a transient
    outage of the auth endpoint doesn't reject every request.
    """

    def __init__(self, ttl: int = JWKS_CACHE_TTL):
        self.ttl = ttl
        self._keys: dict[str, Any] = {}
        self._fetched_at: float = 0

    @property
    def url(self) -> str:
        return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    def get(self) -> dict[str, Any]:
        now = time.time()
        if self._keys and (now - self._fetched_at) < self.ttl:
            return self._keys

        try:
            response = httpx.get(self.url, timeout=10)
            response.raise_for_status()
            self._keys = response.json()
            self._fetched_at = now
            logger.debug(f"Fetched JWKS from {self.url}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch JWKS: {e}")

        return self._keys or {"keys": []}

    def find(self, kid: str) -> dict[str, Any] | None:
        for key in self.get().get("keys", []):
            if key.get("kid") == kid:
                return key
        return None

    def clear(self) -> None:
        self._keys = {}
        self._fetched_at = 0


jwks_cache = JWKSCache()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the verification key and algorithm for a token.

    Returns:
        Tuple of (key, algorithm)

    Raises:
        JWTError: Unreadable header, unknown kid, or an HS256 token when
            no legacy secret is configured
    """
    header = jwt.get_unverified_header(token)
    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            raise JWTError("HS256 tokens are not accepted without SUPABASE_JWT_SECRET")
        return settings.SUPABASE_JWT_SECRET, "HS256"

    key = jwks_cache.find(kid) if kid else None
    if key is None:
        raise JWTError(f"No signing key for alg={alg}, kid={kid}")
    return key, alg


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its subject.

    Raises:
        HTTPException: 401 if the token is expired, forged, or lacks a
            valid 'sub' claim
    """
    try:
        signing_key, algorithm = _resolve_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=TOKEN_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = UUID(subject)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {subject}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from the Bearer token.

    Raises:
        HTTPException: 401 if token is missing, invalid or expired
    """
    user = decode_access_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Like get_current_user, but returns None instead of raising.

    Used by public endpoints that show more to signed-in staff.
    """
    if credentials is None:
        return None

    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        return None
