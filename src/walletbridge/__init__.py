"""Unified wallet pass model with a Google Wallet API client."""

from walletbridge.builder import PassBuilder
from walletbridge.exceptions import (
    ApiError,
    AuthError,
    ConfigurationError,
    NetworkError,
    PassValidationError,
    SerializationError,
    WalletBridgeError,
)
from walletbridge.models import (
    Barcode,
    BarcodeFormat,
    Image,
    Pass,
    PassClass,
    PassField,
    PassHeader,
    PassMessage,
    PassState,
    PassType,
    ReviewStatus,
    TextAlignment,
    TimeInterval,
)
from walletbridge.settings import GoogleWalletConfig

__all__ = [
    "ApiError",
    "AuthError",
    "Barcode",
    "BarcodeFormat",
    "ConfigurationError",
    "GoogleWalletConfig",
    "Image",
    "NetworkError",
    "Pass",
    "PassBuilder",
    "PassClass",
    "PassField",
    "PassHeader",
    "PassMessage",
    "PassState",
    "PassType",
    "PassValidationError",
    "ReviewStatus",
    "SerializationError",
    "TextAlignment",
    "TimeInterval",
    "WalletBridgeError",
]
