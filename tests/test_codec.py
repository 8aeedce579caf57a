from datetime import datetime

import pytest

from servicedesk import codec
from servicedesk.schema import ServiceRequest, User


@pytest.fixture
def request_record():
    return ServiceRequest(
        ticket_id="REQ-042",
        user_name="Ana | Ops",
        user_dept="Ops",
        user_email="ana@example.com",
        user_phone="",
        category="IT Support - Network",
        priority="CRITICAL",
        subject="VPN | drops",
        description="line one\nline two | with pipe\n;; and a list separator",
        status="RESOLVED",
        assigned_agent="Tom Wilson",
        created_date=datetime(2026, 3, 1, 8, 30, 0),
        last_updated=datetime(2026, 3, 2, 17, 5, 9),
        resolved_date=datetime(2026, 3, 2, 17, 5, 9),
        resolution_notes="Replaced\nrouter",
        comments=["[2026-03-01 09:00:00] first;;second", "[2026-03-02 17:05:09] done|ok"],
    )


class TestFieldTransforms:
    @pytest.mark.parametrize("value", ["", "plain", "a|b", "multi\nline\r\n", "ünïcødé ✓", ";;"])
    def test_field_round_trip(self, value):
        encoded = codec.encode_field(value)
        assert "|" not in encoded and "\n" not in encoded
        assert codec.decode_field(encoded) == value

    def test_none_encodes_as_empty(self):
        assert codec.encode_field(None) == ""
        assert codec.decode_field("") == ""

    @pytest.mark.parametrize("token", ["REQ-001", "not base64!", "abc", "bob@example.com"])
    def test_invalid_token_falls_back_to_literal(self, token):
        assert codec.decode_field(token) == token

    def test_list_round_trip_keeps_separators_inside_elements(self):
        values = ["a;;b", "c|d", "e\nf"]
        assert codec.decode_list(codec.encode_list(values)) == values

    def test_empty_list(self):
        assert codec.encode_list([]) == ""
        assert codec.decode_list("") == []

    def test_timestamps(self):
        assert codec.format_timestamp(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02 03:04:05"
        assert codec.format_timestamp(None) == ""
        assert codec.parse_timestamp("2026-01-02 03:04:05") == datetime(2026, 1, 2, 3, 4, 5)
        assert codec.parse_timestamp("  ") is None


class TestRecords:
    def test_request_line_has_fixed_field_count(self, request_record):
        line = codec.encode_request(request_record)
        assert "\n" not in line
        assert len(line.split("|")) == codec.REQUEST_FIELD_COUNT

    def test_request_round_trip(self, request_record):
        assert codec.decode_request(codec.encode_request(request_record)) == request_record

    def test_optional_fields_round_trip_as_none(self, request_record):
        request_record.assigned_agent = None
        request_record.resolution_notes = None
        request_record.resolved_date = None
        decoded = codec.decode_request(codec.encode_request(request_record))
        assert decoded.assigned_agent is None
        assert decoded.resolution_notes is None
        assert decoded.resolved_date is None

    def test_user_round_trip(self):
        user = User(
            user_id="AB12CD34", name="Bob", department="IT", role="AGENT",
            email="bob@example.com", phone="555", request_history=["REQ-001", "REQ-009"],
        )
        line = codec.encode_user(user)
        assert len(line.split("|")) == codec.USER_FIELD_COUNT
        assert codec.decode_user(line) == user

    def test_plain_text_user_line_is_still_readable(self):
        user = codec.decode_user("U1|Bob|IT|AGENT|bob@example.com|555|REQ-001;;REQ-002")
        assert user.user_id == "U1"
        assert user.role == "AGENT"
        assert user.email == "bob@example.com"
        assert user.request_history == ["REQ-001", "REQ-002"]

    def test_short_lines_are_rejected(self, request_record):
        line = codec.encode_request(request_record)
        assert codec.decode_request(line.rsplit("|", 1)[0]) is None
        assert codec.decode_user("a|b|c") is None

    def test_bad_timestamp_is_rejected(self, request_record):
        parts = codec.encode_request(request_record).split("|")
        parts[11] = codec.encode_field("yesterday")
        assert codec.decode_request("|".join(parts)) is None

    def test_unknown_status_is_rejected(self, request_record):
        parts = codec.encode_request(request_record).split("|")
        parts[9] = codec.encode_field("WAITING")
        assert codec.decode_request("|".join(parts)) is None

    def test_trailing_newline_is_ignored(self, request_record):
        line = codec.encode_request(request_record) + "\r\n"
        assert codec.decode_request(line) == request_record
