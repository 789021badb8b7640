"""Tests for walletbridge/google/convert.py."""

from datetime import datetime, timedelta, timezone

import pytest

from walletbridge.builder import PassBuilder
from walletbridge.google import convert, types
from walletbridge.models import (
    BarcodeFormat,
    Pass,
    PassClass,
    PassMessage,
    PassState,
    PassType,
    ReviewStatus,
    TextAlignment,
)


@pytest.fixture
def simple_ticket() -> Pass:
    return (
        PassBuilder("issuer.pass1", "issuer.class1")
        .title("Ticket")
        .barcode_with_text(BarcodeFormat.QR_CODE, "T1", "T1")
        .field("seat", "Seat", "A1")
        .build()
    )


class TestPassToGenericObject:
    """Tests for conversion of unified passes to generic objects."""

    def test_title_and_barcode(self, simple_ticket: Pass) -> None:
        """The title becomes a localized card title and the barcode keeps its value."""
        obj = convert.pass_to_generic_object(simple_ticket)

        assert obj.id == "issuer.pass1"
        assert obj.class_id == "issuer.class1"
        assert obj.card_title is not None
        assert obj.card_title.default_value is not None
        assert obj.card_title.default_value.value == "Ticket"
        assert obj.card_title.default_value.language == "en-US"
        assert obj.barcode is not None
        assert obj.barcode.barcode_type == "QR_CODE"
        assert obj.barcode.value == "T1"
        assert obj.barcode.alternate_text == "T1"

    def test_wire_format(self, simple_ticket: Pass) -> None:
        """The API payload uses camelCase keys and leaves unset fields out."""
        payload = convert.pass_to_generic_object(simple_ticket).to_api()

        assert payload == {
            "id": "issuer.pass1",
            "classId": "issuer.class1",
            "cardTitle": {"defaultValue": {"language": "en-US", "value": "Ticket"}},
            "barcode": {"type": "QR_CODE", "value": "T1", "alternateText": "T1"},
            "textModulesData": [{"id": "seat", "header": "Seat", "body": "A1"}],
        }

    def test_state_not_sent_when_unset(self, simple_ticket: Pass) -> None:
        assert "state" not in convert.pass_to_generic_object(simple_ticket).to_api()

    @pytest.mark.parametrize(
        "state,expected",
        [
            (PassState.ACTIVE, "ACTIVE"),
            (PassState.INACTIVE, "INACTIVE"),
            (PassState.EXPIRED, "EXPIRED"),
            (PassState.COMPLETED, "COMPLETED"),
        ],
    )
    def test_state_mapping(self, state: PassState, expected: str) -> None:
        p = PassBuilder("a.b", "a.c").title("T").state(state).build()

        assert convert.pass_to_generic_object(p).state == expected

    @pytest.mark.parametrize("barcode_format", list(BarcodeFormat))
    def test_every_barcode_format_mapped(self, barcode_format: BarcodeFormat) -> None:
        p = PassBuilder("a.b", "a.c").title("T").barcode(barcode_format, "123").build()

        obj = convert.pass_to_generic_object(p)

        assert obj.barcode is not None
        assert obj.barcode.barcode_type == barcode_format.value.upper()

    def test_fields_keep_order(self) -> None:
        p = PassBuilder("a.b", "a.c").title("T").field("c", "C", "3").field("a", "A", "1").field("b", "B", "2").build()

        obj = convert.pass_to_generic_object(p)

        assert obj.text_modules_data is not None
        assert [m.id for m in obj.text_modules_data] == ["c", "a", "b"]

    def test_colors_pass_through_unvalidated(self) -> None:
        p = PassBuilder("a.b", "a.c").title("T").background_color("not-a-color").build()

        assert convert.pass_to_generic_object(p).hex_background_color == "not-a-color"

    def test_subtitle_links_and_interval(self) -> None:
        start = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)
        p = PassBuilder("a.b", "a.c").title("T").subtitle("Sub").valid_from(start).link_object("x.o").build()

        obj = convert.pass_to_generic_object(p)

        assert obj.header is not None
        assert obj.header.default_value is not None
        assert obj.header.default_value.value == "Sub"
        assert obj.linked_offer_ids == ["x.o"]
        assert obj.valid_time_interval is not None
        assert obj.valid_time_interval.start is not None
        assert obj.valid_time_interval.start.date == "2025-06-01T18:00:00+00:00"
        assert obj.valid_time_interval.end is None

    def test_logo_alt_text_becomes_content_description(self, concert_ticket: Pass) -> None:
        obj = convert.pass_to_generic_object(concert_ticket)

        assert obj.logo is not None
        assert obj.logo.source_uri.uri == "https://example.com/logo.png"
        assert obj.logo.content_description is not None
        assert obj.logo.content_description.default_value is not None
        assert obj.logo.content_description.default_value.value == "Band logo"

    def test_input_not_mutated(self, concert_ticket: Pass) -> None:
        before = concert_ticket.model_dump()

        convert.pass_to_generic_object(concert_ticket)

        assert concert_ticket.model_dump() == before

    def test_deterministic(self, concert_ticket: Pass) -> None:
        first = convert.pass_to_generic_object(concert_ticket).to_api()
        second = convert.pass_to_generic_object(concert_ticket).to_api()

        assert first == second


class TestGenericObjectToPass:
    """Tests for conversion of generic objects back to unified passes."""

    def test_round_trip(self) -> None:
        """Everything both models can represent survives the round trip."""
        start = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)
        p = (
            PassBuilder("issuer.pass1", "issuer.class1")
            .title("Concert Ticket")
            .subtitle("The Python Band")
            .logo("https://example.com/logo.png", "Band logo")
            .background_color("#4285F4")
            .barcode_with_text(BarcodeFormat.PDF_417, "TICKET123", "TICKET123")
            .field("seat", "Seat", "A23")
            .field("row", "Row", "A")
            .link_object("issuer.offer1")
            .state(PassState.ACTIVE)
            .valid_from(start)
            .valid_until(start + timedelta(hours=5))
            .build()
        )

        back = convert.generic_object_to_pass(convert.pass_to_generic_object(p))

        assert back == p

    def test_parses_api_response(self) -> None:
        """A camelCase response body is read back into a pass."""
        obj = types.GenericObject.model_validate(
            {
                "id": "issuer.pass1",
                "classId": "issuer.class1",
                "state": "active",
                "cardTitle": {"defaultValue": {"language": "en-US", "value": "Ticket"}},
                "barcode": {"type": "qr_code", "value": "T1"},
                "textModulesData": [{"id": "seat", "header": "Seat", "body": "A1"}],
                "kind": "walletobjects#genericObject",
            }
        )

        p = convert.generic_object_to_pass(obj)

        assert p.state == PassState.ACTIVE
        assert p.header.title == "Ticket"
        assert p.barcode is not None
        assert p.barcode.format == BarcodeFormat.QR_CODE
        assert p.get_field("seat") is not None

    def test_provider_only_data_dropped(self) -> None:
        """Hero images, subheaders and messages have no unified counterpart."""
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            card_title=convert.localized("T"),
            subheader=convert.localized("Sub"),
            hero_image=types.Image(source_uri=types.ImageUri(uri="https://example.com/hero.png")),
            messages=[types.Message(body="Hi")],
        )

        p = convert.generic_object_to_pass(obj)

        assert p.header.title == "T"
        assert p.header.subtitle is None
        assert p.header.logo is None

    def test_unknown_state_dropped(self) -> None:
        obj = types.GenericObject(id="a.b", class_id="a.c", state="STATE_UNSPECIFIED")

        assert convert.generic_object_to_pass(obj).state is None

    def test_unknown_barcode_type_dropped(self) -> None:
        obj = types.GenericObject(
            id="a.b", class_id="a.c", barcode=types.Barcode(barcode_type="TEXT_ONLY", value="x")
        )

        assert convert.generic_object_to_pass(obj).barcode is None

    def test_text_module_without_id_gets_positional_key(self) -> None:
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            text_modules_data=[
                types.TextModuleData(id="gate", header="Gate", body="3"),
                types.TextModuleData(header="Note", body="Bring ID"),
            ],
        )

        p = convert.generic_object_to_pass(obj)

        assert [f.key for f in p.fields] == ["gate", "field_1"]
        assert p.fields[1].label == "Note"

    def test_positional_key_avoids_existing_ids(self) -> None:
        """A generated key never collides with an id used by another module."""
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            text_modules_data=[
                types.TextModuleData(id="field_1", header="First", body="1"),
                types.TextModuleData(header="Second", body="2"),
            ],
        )

        p = convert.generic_object_to_pass(obj)

        assert [f.key for f in p.fields] == ["field_1", "field_1_1"]
        assert [f.label for f in p.fields] == ["First", "Second"]

    def test_repeated_module_id_replaced_in_place(self) -> None:
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            text_modules_data=[
                types.TextModuleData(id="seat", header="Seat", body="A1"),
                types.TextModuleData(id="row", header="Row", body="A"),
                types.TextModuleData(id="seat", header="Seat", body="B2"),
            ],
        )

        p = convert.generic_object_to_pass(obj)

        assert [(f.key, f.value) for f in p.fields] == [("seat", "B2"), ("row", "A")]
        text_modules = convert.pass_to_generic_object(p).text_modules_data
        assert text_modules is not None
        assert [m.id for m in text_modules] == ["seat", "row"]

    def test_localized_text_module(self) -> None:
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            text_modules_data=[
                types.TextModuleData(
                    id="k",
                    localized_header=convert.localized("Header"),
                    localized_body=convert.localized("Body"),
                )
            ],
        )

        field = convert.generic_object_to_pass(obj).fields[0]

        assert (field.label, field.value) == ("Header", "Body")

    def test_unparseable_date_dropped(self) -> None:
        obj = types.GenericObject(
            id="a.b",
            class_id="a.c",
            valid_time_interval=types.TimeInterval(start=types.DateTime(date="someday")),
        )

        assert convert.generic_object_to_pass(obj).valid_time_interval is None

    def test_foreground_color_and_alignment_not_carried(self) -> None:
        p = (
            PassBuilder("a.b", "a.c")
            .title("T")
            .foreground_color("#FFFFFF")
            .field_with_alignment("k", "K", "v", TextAlignment.CENTER)
            .build()
        )

        back = convert.generic_object_to_pass(convert.pass_to_generic_object(p))

        assert back.header.foreground_color is None
        assert back.fields[0].text_alignment is None


class TestEventTicketConversion:
    """Tests for event ticket objects."""

    def test_seat_fields_become_seat_info(self, concert_ticket: Pass) -> None:
        obj = convert.pass_to_event_ticket_object(concert_ticket)

        assert obj.seat_info is not None
        assert obj.seat_info.seat is not None
        assert obj.seat_info.seat.default_value is not None
        assert obj.seat_info.seat.default_value.value == "A23"
        assert obj.seat_info.section is not None
        assert obj.seat_info.gate is None
        assert obj.text_modules_data is not None
        assert [m.id for m in obj.text_modules_data] == ["seat", "row", "section"]

    def test_no_seat_info_without_seat_fields(self) -> None:
        p = PassBuilder("a.b", "a.c").pass_type(PassType.EVENT_TICKET).title("T").field("x", "X", "1").build()

        assert convert.pass_to_event_ticket_object(p).seat_info is None

    def test_round_trip_does_not_duplicate_seat_fields(self, concert_ticket: Pass) -> None:
        back = convert.event_ticket_object_to_pass(convert.pass_to_event_ticket_object(concert_ticket))

        assert back.pass_type == PassType.EVENT_TICKET
        assert back.fields == concert_ticket.fields
        assert back.barcode == concert_ticket.barcode
        assert back.linked_objects == concert_ticket.linked_objects

    def test_seat_info_only_becomes_fields(self) -> None:
        obj = types.EventTicketObject(
            id="a.b",
            class_id="a.c",
            seat_info=types.EventSeat(seat=convert.localized("12"), gate=convert.localized("B")),
        )

        p = convert.event_ticket_object_to_pass(obj)

        assert [(f.key, f.label, f.value) for f in p.fields] == [("seat", "Seat", "12"), ("gate", "Gate", "B")]


class TestLoyaltyConversion:
    """Tests for loyalty objects."""

    def test_account_and_points(self) -> None:
        p = (
            PassBuilder("a.member1", "a.rewards")
            .pass_type(PassType.LOYALTY)
            .title("Rewards")
            .field("account_id", "Member", "M-42")
            .field("account_name", "Name", "Ada")
            .field("points", "Stars", "1200")
            .build()
        )

        obj = convert.pass_to_loyalty_object(p)

        assert obj.account_id == "M-42"
        assert obj.account_name == "Ada"
        assert obj.loyalty_points is not None
        assert obj.loyalty_points.label == "Stars"
        assert obj.to_api()["loyaltyPoints"] == {"label": "Stars", "balance": {"int": 1200}}

    def test_non_numeric_points_sent_as_string(self) -> None:
        p = PassBuilder("a.b", "a.c").title("T").field("points", "Tier", "Gold").build()

        obj = convert.pass_to_loyalty_object(p)

        assert obj.to_api()["loyaltyPoints"]["balance"] == {"string": "Gold"}

    def test_loyalty_response_becomes_fields(self) -> None:
        obj = types.LoyaltyObject.model_validate(
            {
                "id": "a.b",
                "classId": "a.c",
                "accountId": "M-42",
                "loyaltyPoints": {"balance": {"double": 12.5}},
            }
        )

        p = convert.loyalty_object_to_pass(obj)

        assert p.pass_type == PassType.LOYALTY
        assert [(f.key, f.value) for f in p.fields] == [("account_id", "M-42"), ("points", "12.5")]
        assert p.fields[1].label == "Points"


class TestDispatch:
    """Tests for to_provider_object and from_provider_object."""

    @pytest.mark.parametrize(
        "pass_type,expected",
        [
            (PassType.EVENT_TICKET, types.EventTicketObject),
            (PassType.LOYALTY, types.LoyaltyObject),
            (PassType.GENERIC, types.GenericObject),
            (PassType.GIFT_CARD, types.GenericObject),
            (PassType.OFFER, types.GenericObject),
        ],
    )
    def test_object_shape_follows_pass_type(self, pass_type: PassType, expected: type) -> None:
        p = PassBuilder("a.b", "a.c").pass_type(pass_type).title("T").build()

        assert isinstance(convert.to_provider_object(p), expected)

    def test_from_provider_object(self) -> None:
        assert convert.from_provider_object(types.LoyaltyObject(id="a.b", class_id="a.c")).pass_type == PassType.LOYALTY
        assert (
            convert.from_provider_object(types.EventTicketObject(id="a.b", class_id="a.c")).pass_type
            == PassType.EVENT_TICKET
        )
        assert convert.from_provider_object(types.GenericObject(id="a.b", class_id="a.c")).pass_type == PassType.GENERIC


class TestAuxiliaryConversions:
    """Tests for messages and classes."""

    def test_message(self) -> None:
        start = datetime(2025, 6, 1, tzinfo=timezone.utc)

        message = convert.message_to_google(PassMessage(header="Gate change", body="Now gate 5", start_time=start))

        assert message.to_api() == {
            "header": "Gate change",
            "body": "Now gate 5",
            "displayInterval": {"start": {"date": "2025-06-01T00:00:00+00:00"}},
        }

    def test_message_without_interval(self) -> None:
        assert convert.message_to_google(PassMessage(body="Hi")).display_interval is None

    def test_pass_class(self) -> None:
        generic_class = convert.pass_class_to_generic_class(
            PassClass(id="a.c", issuer_name="Example", review_status=ReviewStatus.UNDER_REVIEW)
        )

        assert generic_class.to_api() == {"id": "a.c", "issuerName": "Example", "reviewStatus": "UNDER_REVIEW"}
