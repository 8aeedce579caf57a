"""
tools/common.py — Pieces shared by every command module
========================================================
Each command in tools/ follows the same three-part pattern:
  1. A plain dict  → input_schema (JSON Schema: which arguments it takes)
  2. A ToolSpec    → the descriptor (name + description + schema + admin flag)
  3. A def         → the handler: (ToolContext, arguments) -> JSON text

Handlers raise ValueError for missing or bad arguments. A lookup that
finds nothing is not an error: the handler returns {"error": ...}.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from servicedesk.backup import BackupManager
from servicedesk.codec import format_timestamp
from servicedesk.config import Settings
from servicedesk.persistence import FileHandler
from servicedesk.schema import ServiceRequest
from servicedesk.store import RequestManager


class ToolSpec(BaseModel):
    name: str
    description: str
    input_schema: dict[str, Any] = Field(default_factory=dict)
    admin: bool = False


@dataclass
class ToolContext:
    store: RequestManager
    files: FileHandler
    backups: BackupManager
    settings: Settings
    is_admin: bool = False


def dump(result: Any) -> str:
    return json.dumps(result, indent=2, default=str)


def required_arg(arguments: dict, key: str) -> str:
    value = str(arguments.get(key, "")).strip()
    if not value:
        raise ValueError(f"{key} is required")
    return value


def not_found(kind: str, key: str) -> str:
    return dump({"error": f"No {kind} found with {key}"})


def request_summary(r: ServiceRequest) -> dict[str, Any]:
    return {
        "id": r.ticket_id,
        "subject": r.subject,
        "category": r.category,
        "priority": r.priority,
        "status": r.status,
        "user_email": r.user_email,
        "assigned_agent": r.assigned_agent,
        "created": format_timestamp(r.created_date),
    }


def request_detail(r: ServiceRequest) -> dict[str, Any]:
    detail = r.model_dump()
    for key in ("created_date", "last_updated", "resolved_date"):
        detail[key] = format_timestamp(detail[key])
    return detail
