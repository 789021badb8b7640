"""Conversion between unified passes and Google Wallet objects.

All functions are pure: they build new objects and never modify their
input. Conversion to Google is total. Conversion back only reads what has a
unified counterpart; provider-only data (hero images, messages, seat info
already present as fields, ...) is dropped rather than rejected.
"""

from datetime import datetime

import structlog

from walletbridge import models
from walletbridge.google import types

logger = structlog.get_logger(__name__)

DEFAULT_LANGUAGE = "en-US"

BARCODE_TYPES: dict[models.BarcodeFormat, str] = {
    models.BarcodeFormat.QR_CODE: "QR_CODE",
    models.BarcodeFormat.PDF_417: "PDF_417",
    models.BarcodeFormat.AZTEC: "AZTEC",
    models.BarcodeFormat.CODE_128: "CODE_128",
    models.BarcodeFormat.CODE_39: "CODE_39",
    models.BarcodeFormat.DATA_MATRIX: "DATA_MATRIX",
    models.BarcodeFormat.EAN_13: "EAN_13",
    models.BarcodeFormat.UPC_A: "UPC_A",
}
_BARCODE_FORMATS = {value: key for key, value in BARCODE_TYPES.items()}

# Field keys that event tickets also expose as structured seat info.
SEAT_FIELD_KEYS = ("seat", "row", "section", "gate")

ACCOUNT_ID_KEY = "account_id"
ACCOUNT_NAME_KEY = "account_name"
POINTS_KEY = "points"


# --- Building blocks ---


def localized(value: str, language: str = DEFAULT_LANGUAGE) -> types.LocalizedString:
    """Wrap a plain string as a localized string with one default entry."""
    return types.LocalizedString(default_value=types.TranslatedString(language=language, value=value))


def _default_value(value: types.LocalizedString | None) -> str | None:
    if value is None or value.default_value is None:
        return None
    return value.default_value.value


def _barcode_to_google(barcode: models.Barcode | None) -> types.Barcode | None:
    if barcode is None:
        return None
    return types.Barcode(
        barcode_type=BARCODE_TYPES[barcode.format],
        value=barcode.value,
        alternate_text=barcode.alternate_text,
    )


def _barcode_from_google(barcode: types.Barcode | None) -> models.Barcode | None:
    if barcode is None:
        return None
    barcode_format = _BARCODE_FORMATS.get(barcode.barcode_type.upper())
    if barcode_format is None:
        logger.warning("unsupported_barcode_type_dropped", barcode_type=barcode.barcode_type)
        return None
    return models.Barcode(format=barcode_format, value=barcode.value, alternate_text=barcode.alternate_text)


def _state_to_google(state: models.PassState | None) -> str | None:
    return state.value.upper() if state is not None else None


def _state_from_google(state: str | None) -> models.PassState | None:
    if state is None:
        return None
    try:
        return models.PassState(state.lower())
    except ValueError:
        logger.debug("unknown_state_dropped", state=state)
        return None


def _datetime_to_google(value: datetime | None) -> types.DateTime | None:
    return types.DateTime(date=value.isoformat()) if value is not None else None


def _datetime_from_google(value: types.DateTime | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.date)
    except ValueError:
        logger.warning("unparseable_date_dropped", date=value.date)
        return None


def _interval_to_google(interval: models.TimeInterval | None) -> types.TimeInterval | None:
    if interval is None:
        return None
    return types.TimeInterval(start=_datetime_to_google(interval.start), end=_datetime_to_google(interval.end))


def _interval_from_google(interval: types.TimeInterval | None) -> models.TimeInterval | None:
    if interval is None:
        return None
    start = _datetime_from_google(interval.start)
    end = _datetime_from_google(interval.end)
    if start is None and end is None:
        return None
    return models.TimeInterval(start=start, end=end)


def _image_to_google(image: models.Image | None) -> types.Image | None:
    if image is None:
        return None
    return types.Image(
        source_uri=types.ImageUri(uri=image.source_uri),
        content_description=localized(image.alt_text) if image.alt_text is not None else None,
    )


def _image_from_google(image: types.Image | None) -> models.Image | None:
    if image is None:
        return None
    return models.Image(source_uri=image.source_uri.uri, alt_text=_default_value(image.content_description))


def _fields_to_text_modules(fields: list[models.PassField]) -> list[types.TextModuleData] | None:
    if not fields:
        return None
    return [types.TextModuleData(id=f.key, header=f.label, body=f.value) for f in fields]


def _unused_key(base: str, taken: set[str]) -> str:
    key, suffix = base, 1
    while key in taken:
        key = f"{base}_{suffix}"
        suffix += 1
    taken.add(key)
    return key


def _fields_from_text_modules(modules: list[types.TextModuleData] | None) -> list[models.PassField]:
    """Read text modules back as fields with unique keys.

    Modules without an id get ``field_<index>`` (suffixed if that key is
    already used). A repeated id replaces the earlier field in place.
    """
    modules = modules or []
    taken = {module.id for module in modules if module.id}
    fields: list[models.PassField] = []
    positions: dict[str, int] = {}
    for index, module in enumerate(modules):
        key = module.id or _unused_key(f"field_{index}", taken)
        field = models.PassField(
            key=key,
            label=module.header if module.header is not None else (_default_value(module.localized_header) or ""),
            value=module.body if module.body is not None else (_default_value(module.localized_body) or ""),
        )
        if key in positions:
            fields[positions[key]] = field
        else:
            positions[key] = len(fields)
            fields.append(field)
    return fields


def _linked_to_google(linked_objects: list[str]) -> list[str] | None:
    return list(linked_objects) if linked_objects else None


def _append_missing(fields: list[models.PassField], key: str, label: str, value: str | None) -> None:
    if value is None or any(f.key == key for f in fields):
        return
    fields.append(models.PassField(key=key, label=label, value=value))


# --- Generic objects ---


def pass_to_generic_object(p: models.Pass) -> types.GenericObject:
    """Convert a unified pass to a Google ``GenericObject``.

    The foreground color has no generic-object counterpart and is dropped.
    """
    return types.GenericObject(
        id=p.id,
        class_id=p.class_id,
        state=_state_to_google(p.state),
        barcode=_barcode_to_google(p.barcode),
        card_title=localized(p.header.title),
        header=localized(p.header.subtitle) if p.header.subtitle is not None else None,
        logo=_image_to_google(p.header.logo),
        hex_background_color=p.header.background_color,
        valid_time_interval=_interval_to_google(p.valid_time_interval),
        linked_offer_ids=_linked_to_google(p.linked_objects),
        text_modules_data=_fields_to_text_modules(p.fields),
    )


def generic_object_to_pass(obj: types.GenericObject) -> models.Pass:
    """Convert a Google ``GenericObject`` back to a unified pass."""
    return models.Pass(
        id=obj.id,
        class_id=obj.class_id,
        pass_type=models.PassType.GENERIC,
        header=models.PassHeader(
            title=_default_value(obj.card_title) or "",
            subtitle=_default_value(obj.header),
            logo=_image_from_google(obj.logo),
            background_color=obj.hex_background_color,
        ),
        barcode=_barcode_from_google(obj.barcode),
        fields=_fields_from_text_modules(obj.text_modules_data),
        linked_objects=list(obj.linked_offer_ids or []),
        state=_state_from_google(obj.state),
        valid_time_interval=_interval_from_google(obj.valid_time_interval),
    )


# --- Event tickets ---


def pass_to_event_ticket_object(p: models.Pass) -> types.EventTicketObject:
    """Convert a unified pass to a Google ``EventTicketObject``.

    Event names and logos live on the event ticket class, so the header title,
    subtitle and logo are not carried. Fields keyed ``seat``, ``row``,
    ``section`` or ``gate`` are also exposed as structured seat info.
    """
    seat_values = {key: field.value for key in SEAT_FIELD_KEYS if (field := p.get_field(key)) is not None}
    seat_info = None
    if seat_values:
        seat_info = types.EventSeat(**{key: localized(value) for key, value in seat_values.items()})
    return types.EventTicketObject(
        id=p.id,
        class_id=p.class_id,
        state=_state_to_google(p.state),
        barcode=_barcode_to_google(p.barcode),
        seat_info=seat_info,
        hex_background_color=p.header.background_color,
        valid_time_interval=_interval_to_google(p.valid_time_interval),
        linked_offer_ids=_linked_to_google(p.linked_objects),
        text_modules_data=_fields_to_text_modules(p.fields),
    )


def event_ticket_object_to_pass(obj: types.EventTicketObject) -> models.Pass:
    """Convert a Google ``EventTicketObject`` back to a unified pass.

    Seat info that is not already present as a text module becomes a field.
    """
    fields = _fields_from_text_modules(obj.text_modules_data)
    if obj.seat_info is not None:
        for key in SEAT_FIELD_KEYS:
            _append_missing(fields, key, key.capitalize(), _default_value(getattr(obj.seat_info, key)))
    return models.Pass(
        id=obj.id,
        class_id=obj.class_id,
        pass_type=models.PassType.EVENT_TICKET,
        header=models.PassHeader(background_color=obj.hex_background_color),
        barcode=_barcode_from_google(obj.barcode),
        fields=fields,
        linked_objects=list(obj.linked_offer_ids or []),
        state=_state_from_google(obj.state),
        valid_time_interval=_interval_from_google(obj.valid_time_interval),
    )


# --- Loyalty cards ---


def _points_balance(value: str) -> types.LoyaltyPointsBalance:
    try:
        return types.LoyaltyPointsBalance(int_value=int(value))
    except ValueError:
        return types.LoyaltyPointsBalance(string_value=value)


def _points_value(points: types.LoyaltyPoints | None) -> str | None:
    if points is None or points.balance is None:
        return None
    balance = points.balance
    for value in (balance.string_value, balance.int_value, balance.double_value):
        if value is not None:
            return str(value)
    return None


def pass_to_loyalty_object(p: models.Pass) -> types.LoyaltyObject:
    """Convert a unified pass to a Google ``LoyaltyObject``.

    Fields keyed ``account_id`` and ``account_name`` fill the account details
    and a field keyed ``points`` fills the points balance (an integer when the
    value parses as one).
    """
    account_id = p.get_field(ACCOUNT_ID_KEY)
    account_name = p.get_field(ACCOUNT_NAME_KEY)
    points = p.get_field(POINTS_KEY)
    return types.LoyaltyObject(
        id=p.id,
        class_id=p.class_id,
        state=_state_to_google(p.state),
        barcode=_barcode_to_google(p.barcode),
        account_id=account_id.value if account_id else None,
        account_name=account_name.value if account_name else None,
        loyalty_points=(
            types.LoyaltyPoints(label=points.label, balance=_points_balance(points.value)) if points else None
        ),
        hex_background_color=p.header.background_color,
        valid_time_interval=_interval_to_google(p.valid_time_interval),
        linked_offer_ids=_linked_to_google(p.linked_objects),
        text_modules_data=_fields_to_text_modules(p.fields),
    )


def loyalty_object_to_pass(obj: types.LoyaltyObject) -> models.Pass:
    """Convert a Google ``LoyaltyObject`` back to a unified pass."""
    fields = _fields_from_text_modules(obj.text_modules_data)
    _append_missing(fields, ACCOUNT_ID_KEY, "Account ID", obj.account_id)
    _append_missing(fields, ACCOUNT_NAME_KEY, "Account name", obj.account_name)
    points_label = obj.loyalty_points.label if obj.loyalty_points and obj.loyalty_points.label else "Points"
    _append_missing(fields, POINTS_KEY, points_label, _points_value(obj.loyalty_points))
    return models.Pass(
        id=obj.id,
        class_id=obj.class_id,
        pass_type=models.PassType.LOYALTY,
        header=models.PassHeader(background_color=obj.hex_background_color),
        barcode=_barcode_from_google(obj.barcode),
        fields=fields,
        linked_objects=list(obj.linked_offer_ids or []),
        state=_state_from_google(obj.state),
        valid_time_interval=_interval_from_google(obj.valid_time_interval),
    )


# --- Dispatch and auxiliary types ---


def to_provider_object(p: models.Pass) -> types.WalletObject:
    """Convert a pass to the Google object shape matching its pass type.

    Pass types without a dedicated object shape use ``GenericObject``.
    """
    match p.pass_type:
        case models.PassType.EVENT_TICKET:
            return pass_to_event_ticket_object(p)
        case models.PassType.LOYALTY:
            return pass_to_loyalty_object(p)
        case _:
            return pass_to_generic_object(p)


def from_provider_object(obj: types.WalletObject) -> models.Pass:
    """Convert any supported Google object back to a unified pass."""
    if isinstance(obj, types.EventTicketObject):
        return event_ticket_object_to_pass(obj)
    if isinstance(obj, types.LoyaltyObject):
        return loyalty_object_to_pass(obj)
    return generic_object_to_pass(obj)


def message_to_google(message: models.PassMessage) -> types.Message:
    display_interval = None
    if message.start_time is not None or message.end_time is not None:
        display_interval = types.TimeInterval(
            start=_datetime_to_google(message.start_time),
            end=_datetime_to_google(message.end_time),
        )
    return types.Message(header=message.header, body=message.body, display_interval=display_interval)


def pass_class_to_generic_class(pass_class: models.PassClass) -> types.GenericClass:
    return types.GenericClass(
        id=pass_class.id,
        issuer_name=pass_class.issuer_name,
        review_status=pass_class.review_status.value.upper() if pass_class.review_status else None,
    )
