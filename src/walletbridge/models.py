"""Platform-agnostic wallet pass models.

A :class:`Pass` describes a single wallet item independently of the platform
it ends up on. Use :class:`walletbridge.builder.PassBuilder` to create one and
the functions in :mod:`walletbridge.google.convert` to turn it into a
provider object.
"""

import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Characters accepted by the Wallet API in object and class identifiers.
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


class PassType(StrEnum):
    """Kinds of passes."""

    EVENT_TICKET = "event_ticket"
    FLIGHT = "flight"
    GENERIC = "generic"
    GIFT_CARD = "gift_card"
    LOYALTY = "loyalty"
    OFFER = "offer"
    TRANSIT = "transit"


class BarcodeFormat(StrEnum):
    QR_CODE = "qr_code"
    PDF_417 = "pdf_417"
    AZTEC = "aztec"
    CODE_128 = "code_128"
    CODE_39 = "code_39"
    DATA_MATRIX = "data_matrix"
    EAN_13 = "ean_13"
    UPC_A = "upc_a"


class TextAlignment(StrEnum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    NATURAL = "natural"


class PassState(StrEnum):
    """Lifecycle state of a pass.

    Mirrors the remote state; once a pass exists the provider is authoritative.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    COMPLETED = "completed"


class ReviewStatus(StrEnum):
    DRAFT = "draft"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class _UnifiedModel(BaseModel):
    model_config = ConfigDict(validate_assignment=True)


class Image(_UnifiedModel):
    """Image resource referenced by URI."""

    source_uri: str
    alt_text: str | None = None


class PassHeader(_UnifiedModel):
    """Visual header of a pass. Colors are hex strings such as ``#4285F4``."""

    title: str = ""
    subtitle: str | None = None
    logo: Image | None = None
    background_color: str | None = None
    foreground_color: str | None = None


class Barcode(_UnifiedModel):
    format: BarcodeFormat
    value: str
    alternate_text: str | None = None


class PassField(_UnifiedModel):
    """A custom key/label/value entry shown on the pass."""

    key: str
    label: str
    value: str
    text_alignment: TextAlignment | None = None


class TimeInterval(_UnifiedModel):
    """Validity window. Either bound may be open."""

    start: datetime | None = None
    end: datetime | None = None


class Pass(_UnifiedModel):
    """A single wallet pass instance.

    ``fields`` is ordered: insertion order is display order. ``state`` and
    ``updated_at`` stay ``None`` unless explicitly set (or returned by the
    provider).
    """

    id: str
    class_id: str
    pass_type: PassType = PassType.GENERIC
    header: PassHeader = Field(default_factory=PassHeader)
    barcode: Barcode | None = None
    fields: list[PassField] = Field(default_factory=list)
    linked_objects: list[str] = Field(default_factory=list)
    state: PassState | None = None
    valid_time_interval: TimeInterval | None = None
    updated_at: datetime | None = None

    def get_field(self, key: str) -> PassField | None:
        """Return the field with the given key, if any."""
        return next((f for f in self.fields if f.key == key), None)


class PassMessage(_UnifiedModel):
    """Message displayed to pass holders."""

    header: str | None = None
    body: str
    start_time: datetime | None = None
    end_time: datetime | None = None


class PassClass(_UnifiedModel):
    """Template shared by many passes."""

    id: str
    pass_type: PassType = PassType.GENERIC
    issuer_name: str
    review_status: ReviewStatus | None = None
