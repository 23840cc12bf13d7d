# =============================================================================
# core/services/session_resolver.py - Session Resolution
# =============================================================================
# Turns request headers into an authenticated session, or nothing.
#
# The default resolver verifies the token issued by the auth provider:
# - HS256 tokens against the shared secret (AUTH_JWT_SECRET)
# - ES256/RS256/... tokens against the provider's JWKS, matched by "kid"
#
# The token is read from "Authorization: Bearer <token>" first, then from
# the session cookie. A missing or invalid token is "no session", not an
# error. Only backend trouble (JWKS unreachable, unexpected failures)
# raises SessionResolutionError.
# =============================================================================

import logging
import time
from collections.abc import Mapping
from typing import Any, Protocol

import httpx
from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWKError
from pydantic import ValidationError

from app.config import Settings
from core.models.identity import AuthSession, TokenPayload
from core.services.request_headers import get_bearer_token, get_cookie
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


class SessionResolutionError(ApplicationError):
    """Raised when the identity backend can't be consulted."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "SESSION_RESOLUTION_FAILED")
        super().__init__(message, **kwargs)


class SessionResolver(Protocol):
    """Anything that can resolve a session from request headers."""

    async def resolve(self, headers: Mapping[str, str]) -> AuthSession | None:
        ...


def extract_session_token(
    headers: Mapping[str, str],
    cookie_name: str,
) -> str | None:
    """Bearer header wins over the session cookie."""
    token = get_bearer_token(headers)
    if token:
        return token
    return get_cookie(headers, cookie_name) or None


class JWTSessionResolver:
    """
    Session resolver backed by provider-signed JWTs.

    Example:
        resolver = JWTSessionResolver.from_settings(settings)
        session = await resolver.resolve(request.headers)
        if session:
            print(session.user.id)
    """

    def __init__(
        self,
        secret: str,
        jwks_url: str | None = None,
        audience: str | None = "authenticated",
        cookie_name: str = "session_token",
        jwks_cache_ttl: float = 3600,
        jwks_retry_interval: float = 30,
        fetch_timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.secret = secret
        self.jwks_url = jwks_url
        self.audience = audience
        self.cookie_name = cookie_name
        self.jwks_cache_ttl = jwks_cache_ttl
        self.jwks_retry_interval = jwks_retry_interval
        self.fetch_timeout = fetch_timeout
        self._transport = transport
        self._jwks_cache: dict[str, Any] = {}
        self._jwks_cache_time: float = 0
        self._jwks_last_attempt: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTSessionResolver":
        return cls(
            secret=settings.AUTH_JWT_SECRET,
            jwks_url=settings.jwks_url,
            audience=settings.AUTH_JWT_AUDIENCE,
            cookie_name=settings.SESSION_COOKIE_NAME,
            jwks_cache_ttl=settings.JWKS_CACHE_TTL,
            jwks_retry_interval=settings.JWKS_RETRY_INTERVAL,
            fetch_timeout=settings.JWKS_FETCH_TIMEOUT,
        )

    async def resolve(self, headers: Mapping[str, str]) -> AuthSession | None:
        """
        Resolve the caller's session.

        Returns:
            AuthSession for a valid token, None when there is no usable token

        Raises:
            SessionResolutionError: If the signing keys can't be fetched
        """
        token = extract_session_token(headers, self.cookie_name)
        if not token:
            return None

        signing_key, algorithm = await self._get_signing_key(token)

        options = {"verify_aud": self.audience is not None}
        try:
            payload = jwt.decode(
                token,
                signing_key,
                algorithms=[algorithm],
                audience=self.audience,
                options=options,
            )
        except ExpiredSignatureError:
            logger.warning("Session token has expired")
            return None
        except (JWTError, JWKError) as e:
            logger.warning(f"Session token validation failed: {e}")
            return None

        try:
            claims = TokenPayload.model_validate(payload)
        except ValidationError:
            logger.warning("Session token missing 'sub' claim")
            return None

        logger.debug(f"Resolved session for user: {claims.sub}")
        return AuthSession.from_claims(claims)

    async def _get_signing_key(self, token: str) -> tuple[Any, str]:
        """
        Get the appropriate signing key for a token.

        Returns:
            Tuple of (key, algorithm) to use for verification
        """
        # Decode header without verification to get algorithm and key ID
        try:
            unverified_header = jwt.get_unverified_header(token)
        except JWTError:
            # Unreadable header; decode() will reject the token
            return self.secret, "HS256"

        alg = unverified_header.get("alg", "HS256")
        kid = unverified_header.get("kid")

        if alg == "HS256":
            return self.secret, "HS256"

        if kid and self.jwks_url:
            key = _find_key(await self._fetch_jwks(), kid)
            if key is None:
                # Unknown kid: the provider may have rotated its keys
                key = _find_key(await self._fetch_jwks(force=True), kid)
            if key is not None:
                return key, alg

        logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
        return self.secret, "HS256"

    async def _fetch_jwks(self, force: bool = False) -> dict[str, Any]:
        """
        Fetch the provider's JWKS, cached for jwks_cache_ttl seconds.

        Args:
            force: Refetch even if the cache is fresh (used on a kid miss)

        Fetches are attempted at most once per jwks_retry_interval seconds;
        in between, and whenever the provider is unreachable, the cached
        keys are served as they are.

        Raises:
            SessionResolutionError: If no keys can be fetched and nothing is cached
        """
        now = time.monotonic()
        fresh = self._jwks_cache and (now - self._jwks_cache_time) < self.jwks_cache_ttl
        if fresh and not force:
            return self._jwks_cache

        if self._retry_pending(now):
            if self._jwks_cache:
                return self._jwks_cache
            raise SessionResolutionError(
                "Signing keys unavailable; waiting before the next fetch",
                suggestion="Check AUTH_JWKS_URL and network access to the auth provider",
                details={"jwks_url": self.jwks_url},
            )

        self._jwks_last_attempt = now
        try:
            async with httpx.AsyncClient(
                timeout=self.fetch_timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(self.jwks_url)
                response.raise_for_status()
                jwks = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch JWKS: {e}")
            if self._jwks_cache:
                return self._jwks_cache
            raise SessionResolutionError(
                f"Could not fetch signing keys: {e}",
                suggestion="Check AUTH_JWKS_URL and network access to the auth provider",
                details={"jwks_url": self.jwks_url},
            ) from e

        self._jwks_cache = jwks
        self._jwks_cache_time = now
        logger.debug(f"Fetched JWKS from {self.jwks_url}")
        return jwks

    def _retry_pending(self, now: float) -> bool:
        if self._jwks_last_attempt is None:
            return False
        return (now - self._jwks_last_attempt) < self.jwks_retry_interval


def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None
