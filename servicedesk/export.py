"""
export.py — Human-readable exports
===================================
  - export_requests_csv    : the whole catalog as requests.csv
  - render_request         : one ticket as a detail page (also used by the CLI)
  - export_request_details : that detail page written to <ticket_id>.txt

The csv module's default dialect already quotes any field holding a comma,
a quote or a newline, and doubles embedded quotes.
"""

import csv
import os
from pathlib import Path

from servicedesk.codec import format_timestamp
from servicedesk.errors import PersistenceError
from servicedesk.schema import ServiceRequest
from servicedesk.store import RequestManager

CSV_HEADER = [
    "TicketId", "Status", "Priority", "Category", "Created",
    "User", "Department", "Email", "Subject", "AssignedAgent",
]


def _ensure_dir(export_dir: Path) -> None:
    try:
        export_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"Cannot create export directory {export_dir}: {e}") from e


def export_requests_csv(store: RequestManager, export_dir: os.PathLike | str) -> Path:
    export_dir = Path(export_dir)
    _ensure_dir(export_dir)
    target = export_dir / "requests.csv"
    try:
        with open(target, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            for r in store.list_all():
                writer.writerow([
                    r.ticket_id, r.status, r.priority, r.category,
                    format_timestamp(r.created_date),
                    r.user_name, r.user_dept, r.user_email, r.subject,
                    r.assigned_agent or "",
                ])
    except OSError as e:
        raise PersistenceError(f"Cannot write {target}: {e}") from e
    return target


def render_request(r: ServiceRequest) -> str:
    lines = [
        "=== Request Details ===",
        f"Ticket ID: {r.ticket_id}",
        f"Status: {r.status}",
        f"Created: {format_timestamp(r.created_date)}",
        f"Priority: {r.priority}",
        "",
        f"User: {r.user_name} ({r.user_dept})",
        f"Email: {r.user_email}",
        "",
        f"Subject: {r.subject}",
        f"Category: {r.category}",
        "",
        "Description:",
        r.description,
        "",
        f"Assignment: {r.assigned_agent or ''}",
        f"Last Update: {format_timestamp(r.last_updated)}",
    ]
    if r.resolved_date is not None:
        lines.append(f"Resolved: {format_timestamp(r.resolved_date)}")
    if r.resolution_notes and r.resolution_notes.strip():
        lines.append(f"Resolution Notes: {r.resolution_notes}")
    lines += ["", "Comments:"]
    lines += [f"- {c}" for c in r.comments] or ["(None)"]
    return "\n".join(lines) + "\n"


def export_request_details(r: ServiceRequest, export_dir: os.PathLike | str) -> Path:
    export_dir = Path(export_dir)
    _ensure_dir(export_dir)
    target = export_dir / f"{r.ticket_id}.txt"
    try:
        target.write_text(render_request(r), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Cannot write {target}: {e}") from e
    return target
