"""Test fixtures for walletbridge tests.

Provides a throwaway RSA service-account key, a matching config, and an
in-memory stand-in for the OAuth2 token endpoint and the Wallet API served
through ``httpx.MockTransport``.
"""

import asyncio
import typing as t
from collections.abc import Callable

import httpx
import orjson
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from walletbridge import settings
from walletbridge.builder import PassBuilder
from walletbridge.google.auth import TokenManager
from walletbridge.google.client import GoogleWalletClient
from walletbridge.models import BarcodeFormat, Pass
from walletbridge.settings import GoogleWalletConfig

ISSUER_ID = "3388000000022123456"
SERVICE_ACCOUNT_EMAIL = "wallet-issuer@example-project.iam.gserviceaccount.com"

Route = httpx.Response | Callable[[httpx.Request], httpx.Response]


class WalletBackendStub:
    """Serves the token endpoint and the Wallet API from memory.

    Token responses hand out ``token-1``, ``token-2``, ... API routes are keyed
    by method and path relative to the API base URL; unknown routes get 404.
    """

    def __init__(self) -> None:
        self.token_calls = 0
        self.token_requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_body: bytes | None = None
        self.expires_in = 3600
        self.api_requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Route] = {}
        self._api_prefix = httpx.URL(settings.GOOGLE_WALLET_API_BASE).path.rstrip("/")

    def route(self, method: str, path: str, response: Route) -> None:
        self.routes[(method, path)] = response

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == settings.GOOGLE_WALLET_TOKEN_URI:
            return await self._token(request)
        self.api_requests.append(request)
        path = request.url.path.removeprefix(self._api_prefix)
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": {"code": 404, "message": f"{path} not found"}})
        return route(request) if callable(route) else route

    async def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_calls += 1
        self.token_requests.append(request)
        # let concurrent callers interleave while the exchange is in flight
        await asyncio.sleep(0)
        if self.token_body is not None:
            return httpx.Response(self.token_status, content=self.token_body)
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_grant", "error_description": "bad"})
        return httpx.Response(
            200,
            json={"access_token": f"token-{self.token_calls}", "expires_in": self.expires_in, "token_type": "Bearer"},
        )


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Generate an RSA key standing in for a service-account key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """PKCS#8 PEM encoding of the test key, as found in Google key files."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def wallet_config(private_key_pem: str) -> GoogleWalletConfig:
    return GoogleWalletConfig(
        issuer_id=ISSUER_ID,
        service_account_email=SERVICE_ACCOUNT_EMAIL,
        private_key=private_key_pem,
    )


@pytest.fixture
def backend() -> WalletBackendStub:
    return WalletBackendStub()


@pytest.fixture
def http_client(backend: WalletBackendStub) -> httpx.AsyncClient:
    """An async client whose requests never leave the process."""
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def token_manager(wallet_config: GoogleWalletConfig, http_client: httpx.AsyncClient) -> TokenManager:
    return TokenManager(wallet_config, http_client=http_client)


@pytest.fixture
def wallet_client(wallet_config: GoogleWalletConfig, http_client: httpx.AsyncClient) -> GoogleWalletClient:
    return GoogleWalletClient(wallet_config, http_client=http_client)


@pytest.fixture
def concert_ticket() -> Pass:
    """A fully populated event ticket pass."""
    return (
        PassBuilder(f"{ISSUER_ID}.ticket-001", f"{ISSUER_ID}.concert")
        .title("Concert Ticket")
        .subtitle("The Python Band")
        .logo("https://example.com/logo.png", "Band logo")
        .background_color("#4285F4")
        .barcode_with_text(BarcodeFormat.QR_CODE, "TICKET123", "TICKET123")
        .field("seat", "Seat", "A23")
        .field("row", "Row", "A")
        .field("section", "Section", "Main Floor")
        .link_object(f"{ISSUER_ID}.offer-1")
        .build()
    )


def json_body(request: httpx.Request) -> t.Any:
    """Decode the JSON body of a captured request."""
    return orjson.loads(request.content)
