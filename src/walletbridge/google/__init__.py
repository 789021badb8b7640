"""Google Wallet support: authentication, wire types, conversion and API client."""

from walletbridge.google.auth import AccessToken, ServiceAccountSigner, TokenManager
from walletbridge.google.client import GoogleWalletClient
from walletbridge.google.types import (
    AddMessageRequest,
    EventTicketObject,
    GenericClass,
    GenericObject,
    LoyaltyObject,
    Message,
    ObjectListResponse,
)

__all__ = [
    "AccessToken",
    "AddMessageRequest",
    "EventTicketObject",
    "GenericClass",
    "GenericObject",
    "GoogleWalletClient",
    "LoyaltyObject",
    "Message",
    "ObjectListResponse",
    "ServiceAccountSigner",
    "TokenManager",
]
