"""Google Wallet REST API resource types.

Attributes use snake_case; the wire format is camelCase. Everything except
identifiers is optional and absent values are never serialized, so a payload
carries exactly what was set. Unknown fields in API responses are ignored.

See: https://developers.google.com/wallet/reference/rest
"""

import typing as t

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GoogleModel(BaseModel):
    """Base for all Wallet API resources."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_api(self) -> dict[str, t.Any]:
        """Return the JSON-ready wire representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Shared building blocks ---


class TranslatedString(GoogleModel):
    language: str
    value: str


class LocalizedString(GoogleModel):
    """A string with a default value plus optional per-locale overrides."""

    default_value: TranslatedString | None = None
    translated_values: list[TranslatedString] | None = None


class Barcode(GoogleModel):
    barcode_type: str = Field(alias="type")
    value: str
    alternate_text: str | None = None


class ImageUri(GoogleModel):
    uri: str
    description: str | None = None


class Image(GoogleModel):
    source_uri: ImageUri
    content_description: LocalizedString | None = None


class DateTime(GoogleModel):
    date: str  # ISO 8601, with or without offset


class TimeInterval(GoogleModel):
    start: DateTime | None = None
    end: DateTime | None = None


class TextModuleData(GoogleModel):
    """A header/body pair shown in the pass details."""

    id: str | None = None
    header: str | None = None
    body: str | None = None
    localized_header: LocalizedString | None = None
    localized_body: LocalizedString | None = None


class Message(GoogleModel):
    id: str | None = None
    header: str | None = None
    body: str | None = None
    display_interval: TimeInterval | None = None
    message_type: str | None = None


class AddMessageRequest(GoogleModel):
    message: Message


class Pagination(GoogleModel):
    results_per_page: int | None = None
    next_page_token: str | None = None


# --- Generic passes ---


class GenericObject(GoogleModel):
    id: str
    class_id: str
    state: str | None = None
    barcode: Barcode | None = None
    card_title: LocalizedString | None = None
    header: LocalizedString | None = None
    subheader: LocalizedString | None = None
    logo: Image | None = None
    hex_background_color: str | None = None
    hero_image: Image | None = None
    valid_time_interval: TimeInterval | None = None
    linked_offer_ids: list[str] | None = None
    text_modules_data: list[TextModuleData] | None = None
    messages: list[Message] | None = None


class FieldReference(GoogleModel):
    field_path: str | None = None
    date_format: str | None = None


class FieldSelector(GoogleModel):
    fields: list[FieldReference] | None = None


class TemplateItem(GoogleModel):
    first_value: FieldSelector | None = None
    second_value: FieldSelector | None = None
    predefined_item: str | None = None


class CardRowOneItem(GoogleModel):
    item: TemplateItem | None = None


class CardRowTwoItems(GoogleModel):
    start_item: TemplateItem | None = None
    end_item: TemplateItem | None = None


class CardRowThreeItems(GoogleModel):
    start_item: TemplateItem | None = None
    middle_item: TemplateItem | None = None
    end_item: TemplateItem | None = None


class CardRowTemplateInfo(GoogleModel):
    one_item: CardRowOneItem | None = None
    two_items: CardRowTwoItems | None = None
    three_items: CardRowThreeItems | None = None


class CardTemplateOverride(GoogleModel):
    card_row_template_infos: list[CardRowTemplateInfo] | None = None


class DetailsItemInfo(GoogleModel):
    item: TemplateItem | None = None


class DetailsTemplateOverride(GoogleModel):
    details_item_infos: list[DetailsItemInfo] | None = None


class FirstRowOption(GoogleModel):
    field_option: FieldSelector | None = None
    transit_option: str | None = None


class ListTemplateOverride(GoogleModel):
    first_row_option: FirstRowOption | None = None
    second_row_option: FieldSelector | None = None
    third_row_option: FieldSelector | None = None


class BarcodeSectionDetail(GoogleModel):
    field_selector: FieldSelector | None = None


class CardBarcodeSectionDetails(GoogleModel):
    first_top_detail: BarcodeSectionDetail | None = None
    second_top_detail: BarcodeSectionDetail | None = None
    first_bottom_detail: BarcodeSectionDetail | None = None


class ClassTemplateInfo(GoogleModel):
    """How passes of a class lay out their fields."""

    card_template_override: CardTemplateOverride | None = None
    details_template_override: DetailsTemplateOverride | None = None
    list_template_override: ListTemplateOverride | None = None
    card_barcode_section_details: CardBarcodeSectionDetails | None = None


class GenericClass(GoogleModel):
    id: str
    issuer_name: str | None = None
    review_status: str | None = None
    class_template_info: ClassTemplateInfo | None = None
    messages: list[Message] | None = None


# --- Event tickets ---


class EventSeat(GoogleModel):
    seat: LocalizedString | None = None
    row: LocalizedString | None = None
    section: LocalizedString | None = None
    gate: LocalizedString | None = None


class EventTicketObject(GoogleModel):
    id: str
    class_id: str
    state: str | None = None
    barcode: Barcode | None = None
    seat_info: EventSeat | None = None
    ticket_holder_name: str | None = None
    ticket_number: str | None = None
    hex_background_color: str | None = None
    valid_time_interval: TimeInterval | None = None
    linked_offer_ids: list[str] | None = None
    text_modules_data: list[TextModuleData] | None = None
    messages: list[Message] | None = None


# --- Loyalty cards ---


class LoyaltyPointsBalance(GoogleModel):
    string_value: str | None = Field(default=None, alias="string")
    int_value: int | None = Field(default=None, alias="int")
    double_value: float | None = Field(default=None, alias="double")


class LoyaltyPoints(GoogleModel):
    label: str | None = None
    balance: LoyaltyPointsBalance | None = None


class LoyaltyObject(GoogleModel):
    id: str
    class_id: str
    state: str | None = None
    barcode: Barcode | None = None
    account_id: str | None = None
    account_name: str | None = None
    loyalty_points: LoyaltyPoints | None = None
    hex_background_color: str | None = None
    valid_time_interval: TimeInterval | None = None
    linked_offer_ids: list[str] | None = None
    text_modules_data: list[TextModuleData] | None = None
    messages: list[Message] | None = None


WalletObject = GenericObject | EventTicketObject | LoyaltyObject
WalletObjectT = t.TypeVar("WalletObjectT", GenericObject, EventTicketObject, LoyaltyObject)
ResourceT = t.TypeVar("ResourceT", bound=GoogleModel)


class ObjectListResponse(GoogleModel, t.Generic[ResourceT]):
    """A single page of a list call."""

    resources: list[ResourceT] = Field(default_factory=list)
    pagination: Pagination | None = None

    @property
    def next_page_token(self) -> str | None:
        return self.pagination.next_page_token if self.pagination else None


class AddMessageResponse(GoogleModel, t.Generic[ResourceT]):
    """Response of an ``addMessage`` call: the updated resource."""

    resource: ResourceT


# --- Save links ---


class JwtObjectPayload(GoogleModel):
    generic_objects: list[dict[str, t.Any]] | None = None
    event_ticket_objects: list[dict[str, t.Any]] | None = None
    loyalty_objects: list[dict[str, t.Any]] | None = None


class SaveJwtPayload(GoogleModel):
    """Claims of a "Save to Google Wallet" JWT."""

    iss: str
    aud: str = "google"
    typ: str = "savetowallet"
    iat: int
    origins: list[str] | None = None
    payload: JwtObjectPayload
