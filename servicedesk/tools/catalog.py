"""
tools/catalog.py — Commands for reports, exports and data management
=====================================================================
  - summary_report : counts by status, category and priority, plus the
                     average time to first resolution
  - export_csv     : admin, write exports/requests.csv
  - export_request : admin, write one ticket's detail page to a text file
  - save / load    : admin, flush to or reload from the data directory
  - backup         : admin, timestamped copy of the catalog files
  - restore        : admin, bring back the newest backup and reload it
"""

from servicedesk.export import export_request_details, export_requests_csv
from servicedesk.reports import (
    average_resolution_minutes,
    count_by_category,
    count_by_priority,
    summary_statistics,
)
from servicedesk.tools.common import ToolContext, ToolSpec, dump, not_found, required_arg

_no_arguments = {"type": "object", "properties": {}, "required": []}


# ── summary_report ────────────────────────────────────────────────────────────

summary_report_tool = ToolSpec(
    name="summary_report",
    description="Ticket counts by status, category and priority, and average resolution time.",
    input_schema=_no_arguments,
)


def summary_report(ctx: ToolContext, arguments: dict) -> str:
    average = average_resolution_minutes(ctx.store)
    return dump({
        "summary": summary_statistics(ctx.store),
        "by_category": count_by_category(ctx.store),
        "by_priority": count_by_priority(ctx.store),
        "average_resolution_minutes": round(average, 1) if average is not None else None,
    })


# ── exports ───────────────────────────────────────────────────────────────────

export_csv_tool = ToolSpec(
    name="export_csv",
    description="Export every ticket to requests.csv in the export directory.",
    input_schema=_no_arguments,
    admin=True,
)


def export_csv(ctx: ToolContext, arguments: dict) -> str:
    path = export_requests_csv(ctx.store, ctx.settings.export_dir)
    return dump({"exported": str(path.resolve())})


export_request_tool = ToolSpec(
    name="export_request",
    description="Export one ticket's full details to <ticket_id>.txt.",
    input_schema={
        "type": "object",
        "properties": {"ticket_id": {"type": "string"}},
        "required": ["ticket_id"],
    },
    admin=True,
)


def export_request(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = required_arg(arguments, "ticket_id").upper()
    request = ctx.store.find_by_id(ticket_id)
    if request is None:
        return not_found("ticket", f"ID: {ticket_id}")
    path = export_request_details(request, ctx.settings.export_dir)
    return dump({"exported": str(path.resolve())})


# ── data management ───────────────────────────────────────────────────────────

save_tool = ToolSpec(name="save", description="Write the catalog to disk.", input_schema=_no_arguments, admin=True)
load_tool = ToolSpec(name="load", description="Reload the catalog from disk.", input_schema=_no_arguments, admin=True)
backup_tool = ToolSpec(
    name="backup",
    description="Copy the catalog files into a new timestamped backup directory.",
    input_schema=_no_arguments,
    admin=True,
)
restore_tool = ToolSpec(
    name="restore",
    description="Overwrite the catalog files with the newest backup and reload.",
    input_schema=_no_arguments,
    admin=True,
)


def save(ctx: ToolContext, arguments: dict) -> str:
    ctx.files.save_data()
    return dump({"saved": str(ctx.files.data_dir.resolve())})


def load(ctx: ToolContext, arguments: dict) -> str:
    ctx.files.load_data()
    return dump({
        "users": len(ctx.store.list_users()),
        "requests": len(ctx.store.list_all()),
        "next_ticket_id": ctx.store.preview_next_ticket_id(),
    })


def backup(ctx: ToolContext, arguments: dict) -> str:
    if ctx.store.has_changes:
        # snapshot what is in memory, not a stale file
        ctx.files.save_data()
    path = ctx.backups.create_backup()
    return dump({"backup": str(path.resolve())})


def restore(ctx: ToolContext, arguments: dict) -> str:
    path = ctx.backups.restore_latest_backup()
    return dump({
        "restored_from": str(path.resolve()),
        "users": len(ctx.store.list_users()),
        "requests": len(ctx.store.list_all()),
    })
