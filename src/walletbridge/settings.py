"""Google Wallet configuration.

Endpoint settings are read once from the environment (or a ``.env`` file)
with python-decouple. Credentials are never read implicitly: build a
:class:`GoogleWalletConfig` yourself, or call :func:`load_config` to read it
from the environment.

See: https://developers.google.com/wallet/generic/web/prerequisites
"""

import typing as t
from pathlib import Path

import orjson
from decouple import UndefinedValueError, config
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from walletbridge.exceptions import ConfigurationError

GOOGLE_WALLET_API_BASE: str = config(
    "GOOGLE_WALLET_API_BASE", default="https://walletobjects.googleapis.com/walletobjects/v1"
)
GOOGLE_WALLET_TOKEN_URI: str = config("GOOGLE_WALLET_TOKEN_URI", default="https://oauth2.googleapis.com/token")
GOOGLE_WALLET_SAVE_URL_BASE: str = config("GOOGLE_WALLET_SAVE_URL_BASE", default="https://pay.google.com/gp/v/save/")
GOOGLE_WALLET_HTTP_TIMEOUT: float = config("GOOGLE_WALLET_HTTP_TIMEOUT", default=30.0, cast=float)
# Seconds of remaining lifetime below which a cached access token is renewed.
GOOGLE_WALLET_TOKEN_RENEWAL_MARGIN: int = config("GOOGLE_WALLET_TOKEN_RENEWAL_MARGIN", default=15, cast=int)

GOOGLE_WALLET_SCOPE = "https://www.googleapis.com/auth/wallet_object.issuer"


class GoogleWalletConfig(BaseModel):
    """Service-account credentials for one Google Wallet issuer.

    Immutable once created. The private key is kept out of ``repr()``.
    """

    model_config = ConfigDict(frozen=True)

    issuer_id: str = Field(min_length=1)
    service_account_email: str = Field(min_length=1)
    private_key: str = Field(min_length=1, repr=False)

    @classmethod
    def from_service_account_info(cls, info: dict[str, t.Any], issuer_id: str) -> "GoogleWalletConfig":
        """Build a config from a parsed Google service-account JSON key.

        Args:
            info: The key file contents (``client_email`` and ``private_key`` are used).
            issuer_id: The Wallet issuer id (not part of the key file).

        Raises:
            ConfigurationError: If a required entry is missing or empty.
        """
        try:
            return cls(
                issuer_id=issuer_id,
                service_account_email=info.get("client_email", ""),
                private_key=info.get("private_key", ""),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid service account info: {e}") from e

    @classmethod
    def from_service_account_file(cls, path: str | Path, issuer_id: str) -> "GoogleWalletConfig":
        """Build a config from a Google service-account JSON key file.

        Raises:
            ConfigurationError: If the file cannot be read, is not JSON, or is incomplete.
        """
        try:
            info = orjson.loads(Path(path).read_bytes())
        except FileNotFoundError as e:
            raise ConfigurationError(f"Service account file not found: {path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read service account file {path}: {e}") from e
        except orjson.JSONDecodeError as e:
            raise ConfigurationError(f"Service account file is not valid JSON: {path}") from e
        if not isinstance(info, dict):
            raise ConfigurationError(f"Service account file must contain a JSON object: {path}")
        return cls.from_service_account_info(info, issuer_id)


def load_config() -> GoogleWalletConfig:
    """Read credentials from the environment.

    ``GOOGLE_WALLET_ISSUER_ID`` is always required. Credentials come from
    ``GOOGLE_WALLET_SERVICE_ACCOUNT_FILE`` when set, otherwise from
    ``GOOGLE_WALLET_SERVICE_ACCOUNT_EMAIL`` and ``GOOGLE_WALLET_PRIVATE_KEY``
    (literal ``\\n`` sequences in the key are turned into newlines).

    Raises:
        ConfigurationError: If a required variable is missing or empty.
    """
    try:
        issuer_id: str = config("GOOGLE_WALLET_ISSUER_ID")
        service_account_file: str = config("GOOGLE_WALLET_SERVICE_ACCOUNT_FILE", default="")
        if service_account_file:
            return GoogleWalletConfig.from_service_account_file(service_account_file, issuer_id)
        email: str = config("GOOGLE_WALLET_SERVICE_ACCOUNT_EMAIL")
        private_key: str = config("GOOGLE_WALLET_PRIVATE_KEY")
    except UndefinedValueError as e:
        raise ConfigurationError(str(e)) from e

    try:
        return GoogleWalletConfig(
            issuer_id=issuer_id,
            service_account_email=email,
            private_key=private_key.replace("\\n", "\n"),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid Google Wallet configuration: {e}") from e
