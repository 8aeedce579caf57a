"""
codec.py — Line codec for the catalog files
============================================
One record per line, fields joined with "|". Every field is base64 of its
UTF-8 bytes, so a "|" or a newline typed into a description can never
break the line structure.

List fields (a user's request history, a ticket's comments) are stored
as one field:

    ["a", "b"]  ->  enc("a") + ";;" + enc("b")  ->  enc(that)

Base64 output never contains ";", so splitting the decoded field on ";;"
is safe.

Reading is forgiving:
  - a token that is not valid base64 is taken as literal text, which keeps
    older plain-text files loadable
  - a line with too few fields, a bad timestamp, or a value outside the
    enumerated sets decodes to None and the caller skips it
"""

import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from servicedesk.schema import TIMESTAMP_FORMAT, ServiceRequest, User

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
LIST_SEPARATOR = ";;"

USER_FIELD_COUNT = 7
REQUEST_FIELD_COUNT = 16


# ── Field transforms ──────────────────────────────────────────────────────────

def encode_field(value: Optional[str]) -> str:
    if value is None:
        value = ""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def decode_field(token: str) -> str:
    try:
        return base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return token


def encode_list(values: list[str]) -> str:
    return encode_field(LIST_SEPARATOR.join(encode_field(v) for v in values))


def decode_list(token: str) -> list[str]:
    joined = decode_field(token)
    if not joined.strip():
        return []
    return [decode_field(part) for part in joined.split(LIST_SEPARATOR)]


def format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ""


def parse_timestamp(text: str) -> Optional[datetime]:
    if not text.strip():
        return None
    return datetime.strptime(text.strip(), TIMESTAMP_FORMAT)


def _empty_to_none(text: str) -> Optional[str]:
    return text if text.strip() else None


def split_line(line: str) -> list[str]:
    return line.rstrip("\r\n").split(FIELD_SEPARATOR)


# ── Users ─────────────────────────────────────────────────────────────────────

def encode_user(user: User) -> str:
    return FIELD_SEPARATOR.join([
        encode_field(user.user_id),
        encode_field(user.name),
        encode_field(user.department),
        encode_field(user.role),
        encode_field(user.email),
        encode_field(user.phone),
        encode_list(user.request_history),
    ])


def decode_user(line: str) -> Optional[User]:
    parts = split_line(line)
    if len(parts) < USER_FIELD_COUNT:
        return None
    try:
        return User(
            user_id=decode_field(parts[0]),
            name=decode_field(parts[1]),
            department=decode_field(parts[2]),
            role=decode_field(parts[3]),
            email=decode_field(parts[4]),
            phone=decode_field(parts[5]),
            request_history=decode_list(parts[6]),
        )
    except ValidationError as e:
        logger.warning("Skipping unreadable user record: %s", e)
        return None


# ── Service requests ──────────────────────────────────────────────────────────

def encode_request(request: ServiceRequest) -> str:
    return FIELD_SEPARATOR.join([
        encode_field(request.ticket_id),
        encode_field(request.user_name),
        encode_field(request.user_dept),
        encode_field(request.user_email),
        encode_field(request.user_phone),
        encode_field(request.category),
        encode_field(request.priority),
        encode_field(request.subject),
        encode_field(request.description),
        encode_field(request.status),
        encode_field(request.assigned_agent),
        encode_field(format_timestamp(request.created_date)),
        encode_field(format_timestamp(request.last_updated)),
        encode_field(format_timestamp(request.resolved_date)),
        encode_field(request.resolution_notes),
        encode_list(request.comments),
    ])


def decode_request(line: str) -> Optional[ServiceRequest]:
    parts = split_line(line)
    if len(parts) < REQUEST_FIELD_COUNT:
        return None
    fields = [decode_field(p) for p in parts[:REQUEST_FIELD_COUNT - 1]]
    try:
        return ServiceRequest(
            ticket_id=fields[0],
            user_name=fields[1],
            user_dept=fields[2],
            user_email=fields[3],
            user_phone=fields[4],
            category=fields[5],
            priority=fields[6],
            subject=fields[7],
            description=fields[8],
            status=fields[9],
            assigned_agent=_empty_to_none(fields[10]),
            created_date=parse_timestamp(fields[11]),
            last_updated=parse_timestamp(fields[12]),
            resolved_date=parse_timestamp(fields[13]),
            resolution_notes=_empty_to_none(fields[14]),
            comments=decode_list(parts[15]),
        )
    except ValueError as e:
        # ValidationError is a ValueError; so is a malformed timestamp
        logger.warning("Skipping unreadable request record: %s", e)
        return None
