"""Async client for the Google Wallet REST API.

Every networked method fetches a bearer token from the :class:`TokenManager`,
sends one request and returns the typed resource from the response. Methods
take Google objects, never unified passes: convert with
:mod:`walletbridge.google.convert` first.

Failures are raised, never retried:

- non-2xx responses raise :class:`ApiError` with the status and raw body,
- transport failures raise :class:`NetworkError`,
- unreadable response bodies raise :class:`SerializationError`,
- token problems raise :class:`AuthError`.

A client and its :class:`TokenManager` belong to the event loop they are
first used on. Create them inside that loop and do not share them across
loops; the manager's renewal lock is bound to a single loop.
"""

import typing as t
from datetime import datetime, timezone
from urllib.parse import quote

import httpx
import orjson
import structlog
from pydantic import ValidationError

from walletbridge import settings
from walletbridge.exceptions import ApiError, NetworkError, SerializationError
from walletbridge.google import types
from walletbridge.google.auth import TokenManager
from walletbridge.settings import GoogleWalletConfig

logger = structlog.get_logger(__name__)

GENERIC_CLASS = "genericClass"
GENERIC_OBJECT = "genericObject"
EVENT_TICKET_OBJECT = "eventTicketObject"
LOYALTY_OBJECT = "loyaltyObject"

ResponseT = t.TypeVar("ResponseT", bound=types.GoogleModel)


class GoogleWalletClient:
    """Client for Google Wallet classes and objects.

    Use it as an async context manager, or call :meth:`close` when done.
    """

    def __init__(
        self,
        config: GoogleWalletConfig,
        http_client: httpx.AsyncClient | None = None,
        token_manager: TokenManager | None = None,
        base_url: str | None = None,
        save_url_base: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Service-account credentials and issuer id.
            http_client: Client for all requests, shared with the token
                manager. If not provided, one is created and closed by :meth:`close`.
            token_manager: Token source. Defaults to one built from ``config``;
                a manager passed in is left open by :meth:`close`.
            base_url: API base URL. Defaults to the configured one.
            save_url_base: Prefix of "Save to Google Wallet" links.
        """
        self.config = config
        self.base_url = (base_url or settings.GOOGLE_WALLET_API_BASE).rstrip("/")
        self.save_url_base = save_url_base or settings.GOOGLE_WALLET_SAVE_URL_BASE

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=settings.GOOGLE_WALLET_HTTP_TIMEOUT)
        self._owns_token_manager = token_manager is None
        self.token_manager = token_manager or TokenManager(config, http_client=self._client)

    # --- Transport ---

    async def _request(
        self,
        method: str,
        path: str,
        response_model: type[ResponseT],
        body: types.GoogleModel | None = None,
        params: dict[str, str | int | None] | None = None,
    ) -> ResponseT:
        """Send an authenticated request and parse the response.

        Args:
            method: HTTP method.
            path: Resource path relative to the base URL, starting with ``/``.
            response_model: Model the response body is validated into.
            body: Resource sent as the JSON body, if any.
            params: Query parameters; ``None`` values are left out.

        Returns:
            The parsed response.
        """
        token = await self.token_manager.get_valid_token()
        headers = {"Authorization": f"Bearer {token.value}"}
        content = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = orjson.dumps(body.to_api())
        query = {key: value for key, value in (params or {}).items() if value is not None}

        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                content=content,
                params=query or None,
            )
        except httpx.RequestError as e:
            logger.error("wallet_api_request_error", method=method, path=path, error=str(e))
            raise NetworkError(e) from e

        if not response.is_success:
            logger.warning(
                "wallet_api_request_failed",
                method=method,
                path=path,
                status=response.status_code,
                body=response.text[:200],
            )
            raise ApiError(response.status_code, response.text)

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("wallet_api_response_invalid", method=method, path=path, error=str(e))
            raise SerializationError(f"Unexpected response for {method} {path}: {e}") from e

    @staticmethod
    def _path(resource: str, resource_id: str | None = None, action: str | None = None) -> str:
        path = f"/{resource}"
        if resource_id is not None:
            path += f"/{quote(resource_id, safe='')}"
        if action is not None:
            path += f"/{action}"
        return path

    async def _create(self, resource: str, body: ResponseT) -> ResponseT:
        return await self._request("POST", self._path(resource), type(body), body=body)

    async def _get(self, resource: str, resource_id: str, model: type[ResponseT]) -> ResponseT:
        return await self._request("GET", self._path(resource, resource_id), model)

    async def _update(self, resource: str, resource_id: str, body: ResponseT) -> ResponseT:
        return await self._request("PUT", self._path(resource, resource_id), type(body), body=body)

    async def _patch(self, resource: str, resource_id: str, body: ResponseT) -> ResponseT:
        return await self._request("PATCH", self._path(resource, resource_id), type(body), body=body)

    async def _list(
        self,
        resource: str,
        model: type[ResponseT],
        params: dict[str, str | int | None],
    ) -> types.ObjectListResponse[ResponseT]:
        list_model = types.ObjectListResponse[model]  # type: ignore[valid-type]
        return await self._request("GET", self._path(resource), list_model, params=params)

    async def _add_message(
        self,
        resource: str,
        resource_id: str,
        message: types.AddMessageRequest,
        model: type[ResponseT],
    ) -> ResponseT:
        response = await self._request(
            "POST",
            self._path(resource, resource_id, "addMessage"),
            types.AddMessageResponse[model],  # type: ignore[valid-type]
            body=message,
        )
        return response.resource

    # --- Generic classes ---

    async def create_generic_class(self, generic_class: types.GenericClass) -> types.GenericClass:
        return await self._create(GENERIC_CLASS, generic_class)

    async def get_generic_class(self, class_id: str) -> types.GenericClass:
        return await self._get(GENERIC_CLASS, class_id, types.GenericClass)

    async def update_generic_class(self, class_id: str, generic_class: types.GenericClass) -> types.GenericClass:
        return await self._update(GENERIC_CLASS, class_id, generic_class)

    async def patch_generic_class(self, class_id: str, generic_class: types.GenericClass) -> types.GenericClass:
        return await self._patch(GENERIC_CLASS, class_id, generic_class)

    async def list_generic_classes(
        self,
        issuer_id: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> types.ObjectListResponse[types.GenericClass]:
        """List one page of generic classes of an issuer (the configured one by default)."""
        params: dict[str, str | int | None] = {
            "issuerId": issuer_id or self.config.issuer_id,
            "token": page_token,
            "maxResults": max_results,
        }
        return await self._list(GENERIC_CLASS, types.GenericClass, params)

    # --- Generic objects ---

    async def create_generic_object(self, generic_object: types.GenericObject) -> types.GenericObject:
        return await self._create(GENERIC_OBJECT, generic_object)

    async def get_generic_object(self, object_id: str) -> types.GenericObject:
        return await self._get(GENERIC_OBJECT, object_id, types.GenericObject)

    async def update_generic_object(self, object_id: str, generic_object: types.GenericObject) -> types.GenericObject:
        """Replace a generic object. Fields left out are cleared on the remote side."""
        return await self._update(GENERIC_OBJECT, object_id, generic_object)

    async def patch_generic_object(self, object_id: str, generic_object: types.GenericObject) -> types.GenericObject:
        """Update only the fields set on ``generic_object``."""
        return await self._patch(GENERIC_OBJECT, object_id, generic_object)

    async def list_generic_objects(
        self,
        class_id: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> types.ObjectListResponse[types.GenericObject]:
        """List a single page of generic objects, optionally of one class.

        Pass ``response.next_page_token`` back as ``page_token`` for the next page.
        """
        params: dict[str, str | int | None] = {"classId": class_id, "token": page_token, "maxResults": max_results}
        return await self._list(GENERIC_OBJECT, types.GenericObject, params)

    async def add_message_to_generic_object(
        self, object_id: str, message: types.AddMessageRequest
    ) -> types.GenericObject:
        return await self._add_message(GENERIC_OBJECT, object_id, message, types.GenericObject)

    # --- Event ticket objects ---

    async def create_event_ticket_object(self, ticket: types.EventTicketObject) -> types.EventTicketObject:
        return await self._create(EVENT_TICKET_OBJECT, ticket)

    async def get_event_ticket_object(self, object_id: str) -> types.EventTicketObject:
        return await self._get(EVENT_TICKET_OBJECT, object_id, types.EventTicketObject)

    async def update_event_ticket_object(
        self, object_id: str, ticket: types.EventTicketObject
    ) -> types.EventTicketObject:
        return await self._update(EVENT_TICKET_OBJECT, object_id, ticket)

    async def patch_event_ticket_object(
        self, object_id: str, ticket: types.EventTicketObject
    ) -> types.EventTicketObject:
        return await self._patch(EVENT_TICKET_OBJECT, object_id, ticket)

    async def list_event_ticket_objects(
        self,
        class_id: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> types.ObjectListResponse[types.EventTicketObject]:
        params: dict[str, str | int | None] = {"classId": class_id, "token": page_token, "maxResults": max_results}
        return await self._list(EVENT_TICKET_OBJECT, types.EventTicketObject, params)

    async def add_message_to_event_ticket_object(
        self, object_id: str, message: types.AddMessageRequest
    ) -> types.EventTicketObject:
        return await self._add_message(EVENT_TICKET_OBJECT, object_id, message, types.EventTicketObject)

    # --- Loyalty objects ---

    async def create_loyalty_object(self, loyalty: types.LoyaltyObject) -> types.LoyaltyObject:
        return await self._create(LOYALTY_OBJECT, loyalty)

    async def get_loyalty_object(self, object_id: str) -> types.LoyaltyObject:
        return await self._get(LOYALTY_OBJECT, object_id, types.LoyaltyObject)

    async def update_loyalty_object(self, object_id: str, loyalty: types.LoyaltyObject) -> types.LoyaltyObject:
        return await self._update(LOYALTY_OBJECT, object_id, loyalty)

    async def patch_loyalty_object(self, object_id: str, loyalty: types.LoyaltyObject) -> types.LoyaltyObject:
        return await self._patch(LOYALTY_OBJECT, object_id, loyalty)

    async def list_loyalty_objects(
        self,
        class_id: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> types.ObjectListResponse[types.LoyaltyObject]:
        params: dict[str, str | int | None] = {"classId": class_id, "token": page_token, "maxResults": max_results}
        return await self._list(LOYALTY_OBJECT, types.LoyaltyObject, params)

    async def add_message_to_loyalty_object(
        self, object_id: str, message: types.AddMessageRequest
    ) -> types.LoyaltyObject:
        return await self._add_message(LOYALTY_OBJECT, object_id, message, types.LoyaltyObject)

    # --- Save links ---

    def generate_save_url(
        self,
        *objects: types.WalletObject | str,
        origins: list[str] | None = None,
        issued_at: datetime | None = None,
    ) -> str:
        """Build a "Save to Google Wallet" link. No request is made.

        Objects embedded in full are created on save; plain strings are taken
        as ids of generic objects that already exist.

        Args:
            objects: Objects or generic object ids to offer for saving.
            origins: Domains allowed to embed the save button.
            issued_at: Signing time. Defaults to now.

        Returns:
            The save URL, ``<save_url_base><signed JWT>``.

        Raises:
            ValueError: If no object is given.
            AuthError: If the private key cannot be used.
        """
        if not objects:
            raise ValueError("At least one object is required to build a save URL")

        generic: list[dict[str, t.Any]] = []
        event_tickets: list[dict[str, t.Any]] = []
        loyalty: list[dict[str, t.Any]] = []
        for obj in objects:
            if isinstance(obj, str):
                generic.append({"id": obj})
            elif isinstance(obj, types.EventTicketObject):
                event_tickets.append(obj.to_api())
            elif isinstance(obj, types.LoyaltyObject):
                loyalty.append(obj.to_api())
            else:
                generic.append(obj.to_api())

        issued_at = issued_at or datetime.now(timezone.utc)
        claims = types.SaveJwtPayload(
            iss=self.config.service_account_email,
            iat=int(issued_at.timestamp()),
            origins=origins,
            payload=types.JwtObjectPayload(
                generic_objects=generic or None,
                event_ticket_objects=event_tickets or None,
                loyalty_objects=loyalty or None,
            ),
        )
        token = self.token_manager.signer.sign(claims.to_api())
        logger.info("save_url_generated", object_count=len(objects))
        return f"{self.save_url_base}{token}"

    # --- PassClient protocol ---

    async def create_pass(self, pass_object: types.GenericObject) -> types.GenericObject:
        return await self.create_generic_object(pass_object)

    async def get_pass(self, pass_id: str) -> types.GenericObject:
        return await self.get_generic_object(pass_id)

    async def update_pass(self, pass_id: str, pass_object: types.GenericObject) -> types.GenericObject:
        return await self.update_generic_object(pass_id, pass_object)

    async def delete_pass(self, pass_id: str) -> None:
        """Expire a generic object. Google Wallet has no delete operation."""
        current = await self.get_generic_object(pass_id)
        await self.update_generic_object(pass_id, current.model_copy(update={"state": "EXPIRED"}))
        logger.info("pass_expired", pass_id=pass_id)

    # --- Lifecycle ---

    async def close(self) -> None:
        """Close the HTTP client and token manager this client created."""
        if self._owns_token_manager:
            await self.token_manager.close()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GoogleWalletClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()
