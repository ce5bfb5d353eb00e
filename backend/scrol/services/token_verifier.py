"""
Scrol Backend — Identity Token Verifier
========================================

What:  Exchanges an opaque identity token for its verified email claim.
How:   GET <token_verifier_url>?id_token=<token> with httpx; any non-2xx
       answer, or a 2xx answer without an `email` claim, is an invalid token.
Who:   Called once per protected request by the `get_principal` dependency.

No retries: a verifier outage surfaces as a 500 from the global handler.
The token itself is never written to the logs.
"""

import logging
from typing import Optional

import httpx

from scrol.config import settings
from scrol.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Client for the external identity-token verification endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            endpoint:  Override settings.token_verifier_url
            timeout:   Override settings.token_verifier_timeout (seconds)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.endpoint = endpoint or settings.token_verifier_url
        self.timeout = timeout or settings.token_verifier_timeout
        self._transport = transport

    async def verify(self, token: str) -> str:
        """
        Verify a token and return the email it was issued for.

        Raises:
            InvalidTokenError: verifier rejected the token or returned no email
            httpx.HTTPError:   verifier unreachable (mapped to 500 upstream)
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.endpoint, params={"id_token": token})

        if not response.is_success:
            logger.error(
                "Token verification failed: status=%d body=%s",
                response.status_code,
                response.text[:200],
            )
            raise InvalidTokenError(context={"verifier_status": response.status_code})

        try:
            claims = response.json()
        except ValueError:
            logger.error("Token verifier returned a non-JSON body")
            raise InvalidTokenError(context={"reason": "non-json claims"})

        email = claims.get("email") if isinstance(claims, dict) else None
        if not email:
            logger.warning("Token verified but carries no email claim")
            raise InvalidTokenError(context={"reason": "missing email claim"})

        return email


# ── Singleton Instance ────────────────────────────────────────────────────
token_verifier = TokenVerifier()
