"""JWT utilities for authentication using authlib"""

from typing import Dict

import httpx
from aiocache import Cache, cached
from authlib.jose import JoseError, JsonWebToken
from authlib.jose.errors import InvalidTokenError

from ez_forms.auth.models import User, normalize_email
from ez_forms.config import config
from ez_forms.logging_config import get_logger

logger = get_logger(__name__)


class JWTUtils:
    """JWT token utilities using authlib with JWKS caching"""

    def __init__(self, auth_domain: str | None = None, audience: str | None = None):
        self.jwt = JsonWebToken(["RS256"])
        self.auth_domain = auth_domain or config.get("auth_domain")
        self.audience = audience or config.get("auth_audience")
        self.email_claim = config.get("auth_email_claim", "email")

        if not self.auth_domain:
            raise ValueError("AUTH_DOMAIN must be configured")

        self.jwks_url = f"https://{self.auth_domain}/.well-known/jwks.json"
        self.expected_issuer = f"https://{self.auth_domain}/"

    @cached(ttl=3600, cache=Cache.MEMORY)
    async def _fetch_jwks(self) -> Dict:
        """
        Fetch JWKS from the identity provider's well-known endpoint (cached)

        Returns:
            JWKS dictionary
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.jwks_url, timeout=10.0)
                response.raise_for_status()
                jwks_data = response.json()

                logger.info(f"Successfully fetched JWKS from {self.jwks_url}")
                return jwks_data

        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch JWKS from {self.jwks_url}: {e}")
            raise InvalidTokenError(f"Unable to fetch JWKS: {e}")

    def _claims_options(self) -> Dict:
        options = {"iss": {"essential": True, "value": self.expected_issuer}}
        if self.audience:
            options["aud"] = {"essential": True, "value": self.audience}
        return options

    async def verify_token(self, token: str) -> Dict:
        """
        Verify and decode a JWT using the cached JWKS

        Args:
            token: Encoded JWT from the Authorization header

        Returns:
            Decoded and validated claims

        Raises:
            InvalidTokenError: If the token is malformed, expired, or from another issuer
        """
        jwks = await self._fetch_jwks()

        try:
            # jwt.decode picks the signing key from the JWKS using the token's kid
            claims = self.jwt.decode(
                token, jwks, claims_options=self._claims_options()
            )
            claims.validate()
            return claims

        except JoseError as e:
            logger.warning(f"JWT validation failed: {e}")
            raise InvalidTokenError(f"Token validation failed: {e}")

    async def extract_user(self, token: str) -> User:
        """
        Build the requester identity from a verified token

        Args:
            token: Encoded JWT

        Returns:
            User with subject, email (when the token carries one) and selected claims

        Raises:
            InvalidTokenError: If the token is invalid or missing the subject
        """
        claims = await self.verify_token(token)
        user_id = claims.get("sub")

        if not user_id:
            raise InvalidTokenError("Token missing 'sub' claim")

        user_claims = {
            "iss": claims.get("iss"),
            "aud": claims.get("aud"),
            "exp": claims.get("exp"),
            "iat": claims.get("iat"),
            "scope": claims.get("scope"),
        }

        return User(
            user_id=user_id,
            email=normalize_email(claims.get(self.email_claim)),
            claims=user_claims,
        )


# Global JWT utilities instance
jwt_utils = JWTUtils()
