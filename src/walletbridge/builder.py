"""Fluent builder for unified passes.

Example:
    >>> from walletbridge.builder import PassBuilder
    >>> from walletbridge.models import BarcodeFormat, PassType
    >>> ticket = (
    ...     PassBuilder("issuer.pass001", "issuer.class001")
    ...     .pass_type(PassType.EVENT_TICKET)
    ...     .title("Concert Ticket")
    ...     .subtitle("The Python Band")
    ...     .background_color("#4285F4")
    ...     .barcode_with_text(BarcodeFormat.QR_CODE, "TICKET123", "TICKET123")
    ...     .field("seat", "Seat", "A23")
    ...     .build()
    ... )
"""

import typing as t
from datetime import datetime

from walletbridge.exceptions import PassValidationError
from walletbridge.models import (
    IDENTIFIER_PATTERN,
    Barcode,
    BarcodeFormat,
    Image,
    Pass,
    PassField,
    PassState,
    PassType,
    TextAlignment,
    TimeInterval,
)


class PassBuilder:
    """Builds a :class:`Pass` one attribute at a time.

    Setters never raise and always return the builder, so calls can be
    chained. Validation of the struct invariants is deferred to :meth:`build`.
    Business rules for a given pass type are left to the provider.
    """

    def __init__(self, id: str, class_id: str) -> None:
        """Start a pass with only its identity set.

        Args:
            id: Unique object id, usually ``"<issuer_id>.<suffix>"``.
            class_id: Id of the class (template) the pass belongs to.
        """
        self._pass = Pass(id=id, class_id=class_id)

    def pass_type(self, pass_type: PassType) -> t.Self:
        self._pass.pass_type = pass_type
        return self

    def title(self, title: str) -> t.Self:
        """Set the title displayed prominently on the pass."""
        self._pass.header.title = title
        return self

    def subtitle(self, subtitle: str) -> t.Self:
        self._pass.header.subtitle = subtitle
        return self

    def logo(self, source_uri: str, alt_text: str | None = None) -> t.Self:
        self._pass.header.logo = Image(source_uri=source_uri, alt_text=alt_text)
        return self

    def background_color(self, color: str) -> t.Self:
        """Set the background color (hex, e.g. ``"#FF0000"``). Not validated."""
        self._pass.header.background_color = color
        return self

    def foreground_color(self, color: str) -> t.Self:
        """Set the foreground color (hex, e.g. ``"#FFFFFF"``). Not validated."""
        self._pass.header.foreground_color = color
        return self

    def barcode(self, format: BarcodeFormat, value: str) -> t.Self:
        self._pass.barcode = Barcode(format=format, value=value)
        return self

    def barcode_with_text(self, format: BarcodeFormat, value: str, alternate_text: str) -> t.Self:
        """Set a barcode with human-readable text shown below it."""
        self._pass.barcode = Barcode(format=format, value=value, alternate_text=alternate_text)
        return self

    def field(self, key: str, label: str, value: str, text_alignment: TextAlignment | None = None) -> t.Self:
        """Add a field, or replace the field with the same key in place.

        A replaced field keeps its original position.
        """
        new_field = PassField(key=key, label=label, value=value, text_alignment=text_alignment)
        for index, existing in enumerate(self._pass.fields):
            if existing.key == key:
                self._pass.fields[index] = new_field
                return self
        self._pass.fields.append(new_field)
        return self

    def field_with_alignment(self, key: str, label: str, value: str, alignment: TextAlignment) -> t.Self:
        return self.field(key, label, value, text_alignment=alignment)

    def link_object(self, object_id: str) -> t.Self:
        """Link another pass or offer by id."""
        self._pass.linked_objects.append(object_id)
        return self

    def state(self, state: PassState) -> t.Self:
        self._pass.state = state
        return self

    def valid_from(self, start: datetime) -> t.Self:
        interval = self._pass.valid_time_interval or TimeInterval()
        interval.start = start
        self._pass.valid_time_interval = interval
        return self

    def valid_until(self, end: datetime) -> t.Self:
        interval = self._pass.valid_time_interval or TimeInterval()
        interval.end = end
        self._pass.valid_time_interval = interval
        return self

    def build(self) -> Pass:
        """Validate the pass and return an independent copy of it.

        Raises:
            PassValidationError: If any struct invariant is violated. All
                problems are reported at once.
        """
        errors = _collect_errors(self._pass)
        if errors:
            raise PassValidationError(errors)
        return self._pass.model_copy(deep=True)


def _collect_errors(p: Pass) -> list[str]:
    errors: list[str] = []
    for name, value in (("id", p.id), ("class_id", p.class_id)):
        if not value:
            errors.append(f"{name} must not be empty")
        elif not IDENTIFIER_PATTERN.fullmatch(value):
            errors.append(f"{name} {value!r} may only contain letters, digits, '.', '_' and '-'")
    if not p.header.title:
        errors.append("header.title must not be empty")
    if p.barcode is not None and not p.barcode.value:
        errors.append("barcode.value must not be empty")
    keys = [f.key for f in p.fields]
    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        errors.append(f"duplicate field keys: {', '.join(duplicates)}")
    return errors
