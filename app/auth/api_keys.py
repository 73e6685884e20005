# =============================================================================
# app/auth/api_keys.py - Integration Secrets and Webhook Signatures
# =============================================================================
# Guards for callers that are not signed-in users:
# - Jarvis desktop client: static bearer key (JARVIS_API_KEY)
# - Scheduled jobs: bearer secret (CRON_SECRET)
# - Twilio webhooks: X-Twilio-Signature (when TWILIO_VALIDATE_SIGNATURE)
# =============================================================================

import hmac
import logging
from typing import Annotated, Callable, Optional

from fastapi import Header, Request
from twilio.request_validator import RequestValidator

from app.config import settings
from app.exceptions import (
    InvalidApiKeyError,
    InvalidSignatureError,
    ServiceNotConfiguredError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _secrets_match(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


# =============================================================================
# Jarvis API Key
# =============================================================================

def validate_jarvis_api_key(authorization: str | None) -> bool:
    """
    Check an Authorization header against JARVIS_API_KEY.

    A missing header or an unconfigured key always fails.
    """
    api_key = settings.JARVIS_API_KEY
    if not authorization or not api_key:
        return False

    provided = authorization.replace(BEARER_PREFIX, "", 1)
    return _secrets_match(provided, api_key)


async def verify_jarvis_api_key(
    authorization: Annotated[Optional[str], Header()] = None,
) -> None:
    """
    Dependency for /api/jarvis routes.

    Raises:
        InvalidApiKeyError: 401 when the key is missing or wrong
    """
    if not validate_jarvis_api_key(authorization):
        logger.warning("Rejected Jarvis request with missing or invalid API key")
        raise InvalidApiKeyError()


# =============================================================================
# Cron Secret
# =============================================================================

def verify_cron_secret(required: bool = True) -> Callable:
    """
    Build a dependency checking 'Authorization: Bearer <CRON_SECRET>'.

    Args:
        required: When True, an unconfigured CRON_SECRET is a server
            error. When False, the check is skipped if no secret is set.
    """

    async def dependency(
        authorization: Annotated[Optional[str], Header()] = None,
    ) -> None:
        secret = settings.CRON_SECRET
        if not secret:
            if required:
                logger.error("CRON_SECRET is not configured")
                raise ServiceNotConfiguredError("Cron authentication", "CRON_SECRET")
            return

        if not authorization or not _secrets_match(authorization, f"{BEARER_PREFIX}{secret}"):
            logger.warning("Rejected cron request with invalid secret")
            raise InvalidApiKeyError()

    return dependency


# =============================================================================
# Twilio Webhooks
# =============================================================================

def public_base_url(request: Request) -> str:
    """
    Base URL Twilio uses to reach this API.

    PUBLIC_BASE_URL wins (the app usually sits behind a proxy or tunnel);
    otherwise the URL the request arrived on.
    """
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    return str(request.base_url).rstrip("/")


def public_request_url(request: Request) -> str:
    """Full public URL of the request, as Twilio signed it."""
    url = f"{public_base_url(request)}{request.url.path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


async def twilio_form_params(request: Request) -> dict[str, str]:
    """
    Dependency returning a Twilio webhook's form fields.

    Verifies X-Twilio-Signature first when TWILIO_VALIDATE_SIGNATURE is
    enabled.

    Raises:
        InvalidSignatureError: 403 on a missing or forged signature
    """
    form = await request.form()
    params = {key: str(value) for key, value in form.items()}

    if settings.TWILIO_VALIDATE_SIGNATURE:
        validator = RequestValidator(settings.TWILIO_AUTH_TOKEN)
        signature = request.headers.get("X-Twilio-Signature", "")
        if not validator.validate(public_request_url(request), params, signature):
            logger.warning(f"Invalid Twilio signature on {request.url.path}")
            raise InvalidSignatureError()

    return params
