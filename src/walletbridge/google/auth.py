"""OAuth2 service-account authentication for the Google Wallet API.

A service account proves its identity with a JWT assertion signed by its
private key (RS256). The assertion is exchanged at the OAuth2 token endpoint
for a short-lived bearer token, which :class:`TokenManager` caches and renews
lazily shortly before it expires.

See: https://developers.google.com/identity/protocols/oauth2/service-account#httprest
"""

import asyncio
import typing as t
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
import jwt
import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel, ValidationError

from walletbridge import settings
from walletbridge.exceptions import AuthError
from walletbridge.settings import GoogleWalletConfig

logger = structlog.get_logger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = timedelta(hours=1)


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and the instant it stops being valid."""

    value: str
    expires_at: datetime
    token_type: str = "Bearer"

    def expires_within(self, margin: timedelta, now: datetime | None = None) -> bool:
        """Whether the token expires within ``margin`` from ``now``."""
        now = now or datetime.now(timezone.utc)
        return self.expires_at - now <= margin

    def __repr__(self) -> str:
        return f"AccessToken(token_type={self.token_type!r}, expires_at={self.expires_at.isoformat()!r})"


class TokenResponse(BaseModel):
    """Successful response of the OAuth2 token endpoint."""

    access_token: str
    expires_in: int
    token_type: str = "Bearer"


class ServiceAccountSigner:
    """Signs JWT claim sets with a service account's private key.

    The key is parsed on first use and cached.
    """

    ALGORITHM = "RS256"

    def __init__(self, config: GoogleWalletConfig) -> None:
        """Initialize the signer.

        Args:
            config: Credentials holding the PEM-encoded private key.
        """
        self.config = config
        self._private_key: rsa.RSAPrivateKey | None = None

    def _load_private_key(self, pem: str) -> rsa.RSAPrivateKey:
        """Parse a PEM-encoded RSA private key.

        Raises:
            AuthError: If the key is malformed, encrypted or not an RSA key.
        """
        try:
            key = serialization.load_pem_private_key(pem.encode(), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise AuthError(f"Failed to load service account private key: {e}") from e
        if not isinstance(key, rsa.RSAPrivateKey):
            raise AuthError(f"Unsupported private key type {type(key).__name__}, an RSA key is required")
        return key

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        """Get the private key, loading it if necessary."""
        if self._private_key is None:
            self._private_key = self._load_private_key(self.config.private_key)
        return self._private_key

    def sign(self, claims: dict[str, t.Any]) -> str:
        """Sign a claim set and return the compact JWT.

        Raises:
            AuthError: If the key cannot be loaded or signing fails.
        """
        try:
            return jwt.encode(claims, self.private_key, algorithm=self.ALGORITHM)
        except jwt.PyJWTError as e:
            raise AuthError(f"Failed to sign JWT: {e}") from e

    def build_assertion(self, audience: str, now: datetime) -> str:
        """Build the signed assertion exchanged for an access token."""
        issued_at = int(now.timestamp())
        claims = {
            "iss": self.config.service_account_email,
            "sub": self.config.service_account_email,
            "scope": settings.GOOGLE_WALLET_SCOPE,
            "aud": audience,
            "iat": issued_at,
            "exp": issued_at + int(ASSERTION_LIFETIME.total_seconds()),
        }
        return self.sign(claims)


class TokenManager:
    """Caches a bearer token and renews it when it is about to expire.

    Safe to share between concurrent tasks: renewal runs under a lock and the
    cache is re-checked once the lock is held, so callers waiting on the same
    expired token trigger a single exchange. No retries are made.

    The lock binds the manager to the event loop it is first used on; share a
    manager between clients of the same loop only.
    """

    def __init__(
        self,
        config: GoogleWalletConfig,
        http_client: httpx.AsyncClient | None = None,
        token_uri: str | None = None,
        renewal_margin: timedelta | None = None,
        signer: ServiceAccountSigner | None = None,
    ) -> None:
        """Initialize the token manager.

        Args:
            config: Service-account credentials.
            http_client: Client used for the token exchange. If not provided,
                one is created and closed by :meth:`close`.
            token_uri: OAuth2 token endpoint. Defaults to the configured one.
            renewal_margin: Remaining lifetime below which the token is renewed.
            signer: Signer for the assertion. Defaults to one built from ``config``.
        """
        self.config = config
        self.token_uri = token_uri or settings.GOOGLE_WALLET_TOKEN_URI
        if renewal_margin is None:
            renewal_margin = timedelta(seconds=settings.GOOGLE_WALLET_TOKEN_RENEWAL_MARGIN)
        self.renewal_margin = renewal_margin
        self.signer = signer or ServiceAccountSigner(config)

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=settings.GOOGLE_WALLET_HTTP_TIMEOUT)
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> AccessToken | None:
        """The cached token, which may be expired."""
        return self._token

    def _is_fresh(self, token: AccessToken | None) -> t.TypeGuard[AccessToken]:
        return token is not None and not token.expires_within(self.renewal_margin)

    async def get_valid_token(self) -> AccessToken:
        """Return a token with more than ``renewal_margin`` lifetime left.

        Raises:
            AuthError: If signing the assertion or the exchange fails.
        """
        token = self._token
        if self._is_fresh(token):
            return token

        async with self._lock:
            token = self._token
            if self._is_fresh(token):
                return token
            token = await self._exchange()
            self._token = token
            return token

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a new one."""
        self._token = None

    async def _exchange(self) -> AccessToken:
        """Exchange a fresh assertion for an access token."""
        now = datetime.now(timezone.utc)
        assertion = self.signer.build_assertion(self.token_uri, now)

        logger.debug("access_token_exchange_started", service_account=self.config.service_account_email)
        try:
            response = await self._client.post(
                self.token_uri,
                data={"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion},
            )
        except httpx.RequestError as e:
            logger.error("access_token_request_error", token_uri=self.token_uri, error=str(e))
            raise AuthError(f"Token request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "access_token_exchange_failed",
                status=response.status_code,
                body=response.text[:200],
            )
            raise AuthError(
                f"Token exchange failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthError(
                "Token endpoint returned an invalid response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        token = AccessToken(
            value=payload.access_token,
            expires_at=now + timedelta(seconds=payload.expires_in),
            token_type=payload.token_type,
        )
        logger.info("access_token_refreshed", expires_at=token.expires_at.isoformat())
        return token

    async def close(self) -> None:
        """Close the HTTP client if this manager created it."""
        if self._owns_client:
            await self._client.aclose()
