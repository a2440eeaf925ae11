"""
reCAPTCHA verifier adapter - Implements CaptchaVerifier protocol.

Posts the token to the provider's siteverify endpoint with httpx. When
captcha is disabled for the deployment every token is accepted.
"""

import logging

import httpx

from src.domain.models import SignupRequest

logger = logging.getLogger(__name__)


class RecaptchaVerifier:
    """Implements CaptchaVerifier protocol against the siteverify API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        secret: str,
        verify_url: str = "https://www.google.com/recaptcha/api/siteverify",
        enabled: bool = True,
    ) -> None:
        self._client = client
        self._secret = secret
        self._verify_url = verify_url
        self._enabled = enabled

    async def verify(self, token: str, request: SignupRequest) -> bool:
        """
        Return True when the provider accepts the token.

        An empty token, a transport error or a malformed answer counts as a
        failed check.
        """
        if not self._enabled:
            return True
        if not token:
            return False

        try:
            response = await self._client.post(
                self._verify_url,
                data={"secret": self._secret, "response": token, "remoteip": request.ip},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Captcha verification unavailable for %s: %s", request.ip, e)
            return False

        success = payload.get("success") is True
        if not success:
            logger.info("Captcha refused for %s: %s", request.ip, payload.get("error-codes"))
        return success
