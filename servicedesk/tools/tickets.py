"""
tools/tickets.py — Commands for service request operations
===========================================================
Nine commands live here:
  - submit_request    : file a new ticket (creating the user on first use)
  - list_my_requests  : every ticket filed under an email
  - search_requests   : keyword search over subject and description
  - add_comment       : append a follow-up comment to a ticket
  - get_request       : one ticket in full, optionally as a text page
  - list_requests     : admin listing with status/category/priority/agent/date filters
  - assign_request    : admin, hand a ticket to an agent
  - update_status     : admin, move a ticket through the workflow
  - delete_request    : admin, remove a ticket and purge it from user history
"""

from datetime import datetime, time
from typing import Optional

from servicedesk.export import render_request
from servicedesk.reports import sort_requests
from servicedesk.schema import CATEGORIES, PRIORITIES, RESOLVED_STATUSES, STATUSES
from servicedesk.tools.common import (
    ToolContext,
    ToolSpec,
    dump,
    not_found,
    request_detail,
    request_summary,
    required_arg,
)


def _ticket_id(arguments: dict) -> str:
    return required_arg(arguments, "ticket_id").upper()


# ── submit_request ────────────────────────────────────────────────────────────
# The submitter is looked up by email and created as a USER if unknown.

submit_request_input_schema = {
    "type": "object",
    "properties": {
        "email": {"type": "string", "description": "Submitter's email (lookup key)"},
        "name": {"type": "string", "description": "Submitter's name, used if the user is new"},
        "department": {"type": "string", "description": "Submitter's department, used if the user is new"},
        "phone": {"type": "string", "description": "Submitter's phone, used if the user is new"},
        "category": {"type": "string", "enum": list(CATEGORIES)},
        "priority": {"type": "string", "enum": list(PRIORITIES)},
        "subject": {"type": "string", "description": "One-line summary"},
        "description": {"type": "string", "description": "Full description, may span lines"},
    },
    "required": ["email", "category", "priority", "subject", "description"],
}

submit_request_tool = ToolSpec(
    name="submit_request",
    description="Submit a new service request. Returns the assigned ticket ID.",
    input_schema=submit_request_input_schema,
)


def submit_request(ctx: ToolContext, arguments: dict) -> str:
    email = required_arg(arguments, "email")
    category = required_arg(arguments, "category")
    priority = required_arg(arguments, "priority").upper()
    # check before find_or_create so a rejected ticket leaves no new user behind
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    if priority not in PRIORITIES:
        raise ValueError(f"Unknown priority: {priority}")

    store = ctx.store
    user = store.find_or_create_user_by_email(
        email,
        arguments.get("name", ""),
        arguments.get("department", ""),
        "USER",
        arguments.get("phone", ""),
    )
    request = store.create_request(
        user,
        category,
        priority,
        required_arg(arguments, "subject"),
        required_arg(arguments, "description"),
    )
    return dump(request_summary(request))


# ── list_my_requests ──────────────────────────────────────────────────────────

list_my_requests_input_schema = {
    "type": "object",
    "properties": {
        "email": {"type": "string", "description": "Whose tickets to list"},
        "sort": {"type": "string", "enum": ["created", "priority", "status", "none"]},
    },
    "required": ["email"],
}

list_my_requests_tool = ToolSpec(
    name="list_my_requests",
    description="List every ticket submitted under an email address.",
    input_schema=list_my_requests_input_schema,
)


def list_my_requests(ctx: ToolContext, arguments: dict) -> str:
    email = required_arg(arguments, "email")
    if ctx.store.find_user_by_email(email) is None:
        return not_found("user", f"email: {email}")
    matches = sort_requests(ctx.store.list_by_user_email(email), arguments.get("sort", "none"))
    return dump({
        "email": email,
        "count": len(matches),
        "tickets": [request_summary(r) for r in matches],
    })


# ── search_requests ───────────────────────────────────────────────────────────
# With an email the search is limited to that user's own tickets.

search_requests_input_schema = {
    "type": "object",
    "properties": {
        "keyword": {"type": "string", "description": "Text to look for in subject and description"},
        "email": {"type": "string", "description": "Only search this user's tickets"},
    },
    "required": ["keyword"],
}

search_requests_tool = ToolSpec(
    name="search_requests",
    description="Case-insensitive keyword search over ticket subjects and descriptions.",
    input_schema=search_requests_input_schema,
)


def search_requests(ctx: ToolContext, arguments: dict) -> str:
    keyword = required_arg(arguments, "keyword")
    matches = ctx.store.search_by_keyword(keyword)
    email = arguments.get("email", "").strip().lower()
    if email:
        matches = [r for r in matches if r.user_email.lower() == email]
    return dump({
        "keyword": keyword,
        "match_count": len(matches),
        "tickets": [request_summary(r) for r in matches],
    })


# ── add_comment ───────────────────────────────────────────────────────────────
# Users may only comment on their own tickets. With the admin PIN the email
# may be left out and the comment is recorded as an admin comment.

add_comment_input_schema = {
    "type": "object",
    "properties": {
        "ticket_id": {"type": "string", "description": "Ticket to comment on (e.g. REQ-001)"},
        "comment": {"type": "string", "description": "Comment text"},
        "email": {"type": "string", "description": "Commenter's email; must own the ticket"},
    },
    "required": ["ticket_id", "comment"],
}

add_comment_tool = ToolSpec(
    name="add_comment",
    description="Append a timestamped follow-up comment to a ticket.",
    input_schema=add_comment_input_schema,
)


def add_comment(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = _ticket_id(arguments)
    comment = required_arg(arguments, "comment")
    request = ctx.store.find_by_id(ticket_id)
    if request is None:
        return not_found("ticket", f"ID: {ticket_id}")

    email = arguments.get("email", "").strip()
    if email:
        if request.user_email.lower() != email.lower():
            return dump({"error": f"{ticket_id} was not submitted by {email}"})
        ctx.store.add_comment(request, f"User: {comment}")
    elif ctx.is_admin:
        ctx.store.add_comment(request, f"Admin: {comment}")
    else:
        raise ValueError("email is required")

    return dump({
        "id": request.ticket_id,
        "comment_added": request.comments[-1],
        "total_comments": len(request.comments),
    })


# ── get_request ───────────────────────────────────────────────────────────────

get_request_input_schema = {
    "type": "object",
    "properties": {
        "ticket_id": {"type": "string", "description": "Ticket to show"},
        "format": {"type": "string", "enum": ["json", "text"]},
    },
    "required": ["ticket_id"],
}

get_request_tool = ToolSpec(
    name="get_request",
    description="Show one ticket with its full comment log.",
    input_schema=get_request_input_schema,
)


def get_request(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = _ticket_id(arguments)
    request = ctx.store.find_by_id(ticket_id)
    if request is None:
        return not_found("ticket", f"ID: {ticket_id}")
    if arguments.get("format") == "text":
        return render_request(request)
    return dump(request_detail(request))


# ── list_requests ─────────────────────────────────────────────────────────────

def _parse_bound(text: Optional[str], end_of_day: bool) -> Optional[datetime]:
    if not text:
        return None
    try:
        value = datetime.fromisoformat(text.strip())
    except ValueError:
        raise ValueError(f"Invalid date: {text!r} (use YYYY-MM-DD or YYYY-MM-DD HH:MM:SS)")
    if end_of_day and len(text.strip()) == 10:
        value = datetime.combine(value.date(), time(23, 59, 59))
    return value


list_requests_input_schema = {
    "type": "object",
    "properties": {
        "status": {"type": "string", "enum": list(STATUSES)},
        "category": {"type": "string", "enum": list(CATEGORIES)},
        "priority": {"type": "string", "enum": list(PRIORITIES)},
        "agent": {"type": "string", "description": "Only tickets assigned to this agent"},
        "from": {"type": "string", "description": "Created on or after (YYYY-MM-DD)"},
        "to": {"type": "string", "description": "Created on or before (YYYY-MM-DD)"},
        "sort": {"type": "string", "enum": ["created", "priority", "status", "none"]},
    },
    "required": [],
}

list_requests_tool = ToolSpec(
    name="list_requests",
    description="List all tickets, optionally filtered and sorted. Filters combine.",
    input_schema=list_requests_input_schema,
    admin=True,
)


def list_requests(ctx: ToolContext, arguments: dict) -> str:
    store = ctx.store
    start = _parse_bound(arguments.get("from"), end_of_day=False)
    end = _parse_bound(arguments.get("to"), end_of_day=True)
    matches = store.filter_by_date_range(start, end)

    if arguments.get("status"):
        wanted = {r.ticket_id for r in store.filter_by_status(arguments["status"])}
        matches = [r for r in matches if r.ticket_id in wanted]
    if arguments.get("category"):
        wanted = {r.ticket_id for r in store.filter_by_category(arguments["category"])}
        matches = [r for r in matches if r.ticket_id in wanted]
    if arguments.get("priority"):
        wanted = {r.ticket_id for r in store.filter_by_priority(arguments["priority"])}
        matches = [r for r in matches if r.ticket_id in wanted]
    if arguments.get("agent"):
        wanted = {r.ticket_id for r in store.list_by_assigned_agent(arguments["agent"])}
        matches = [r for r in matches if r.ticket_id in wanted]

    matches = sort_requests(matches, arguments.get("sort", "none"))
    return dump({
        "count": len(matches),
        "tickets": [request_summary(r) for r in matches],
    })


# ── assign_request ────────────────────────────────────────────────────────────

assign_request_input_schema = {
    "type": "object",
    "properties": {
        "ticket_id": {"type": "string", "description": "Ticket to assign"},
        "agent": {"type": "string", "description": "Agent name"},
    },
    "required": ["ticket_id", "agent"],
}

assign_request_tool = ToolSpec(
    name="assign_request",
    description="Assign a ticket to an agent. Records an [ASSIGN] comment.",
    input_schema=assign_request_input_schema,
    admin=True,
)


def assign_request(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = _ticket_id(arguments)
    agent = required_arg(arguments, "agent")
    request = ctx.store.find_by_id(ticket_id)
    if request is None:
        return not_found("ticket", f"ID: {ticket_id}")
    ctx.store.assign_agent(request, agent)
    return dump(request_summary(request))


# ── update_status ─────────────────────────────────────────────────────────────
# Any status may follow any other. A note given with RESOLVED or CLOSED is
# kept as the ticket's resolution notes.

update_status_input_schema = {
    "type": "object",
    "properties": {
        "ticket_id": {"type": "string", "description": "Ticket to update"},
        "status": {"type": "string", "enum": list(STATUSES)},
        "actor": {"type": "string", "description": "Who made the change (default ADMIN)"},
        "note": {"type": "string", "description": "Resolution note, used with RESOLVED or CLOSED"},
    },
    "required": ["ticket_id", "status"],
}

update_status_tool = ToolSpec(
    name="update_status",
    description="Change a ticket's status. Usual flow: OPEN → IN_PROGRESS → RESOLVED → CLOSED.",
    input_schema=update_status_input_schema,
    admin=True,
)


def update_status(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = _ticket_id(arguments)
    new_status = required_arg(arguments, "status").upper()
    request = ctx.store.find_by_id(ticket_id)
    if request is None:
        return not_found("ticket", f"ID: {ticket_id}")

    old_status = request.status
    ctx.store.update_status(request, new_status, arguments.get("actor") or "ADMIN")
    note = arguments.get("note", "").strip()
    if new_status in RESOLVED_STATUSES and note:
        ctx.store.record_resolution(request, note)

    return dump({
        "id": request.ticket_id,
        "old_status": old_status,
        "new_status": request.status,
        "resolved_date": request_detail(request)["resolved_date"],
    })


# ── delete_request ────────────────────────────────────────────────────────────

delete_request_input_schema = {
    "type": "object",
    "properties": {
        "ticket_id": {"type": "string", "description": "Ticket to delete"},
    },
    "required": ["ticket_id"],
}

delete_request_tool = ToolSpec(
    name="delete_request",
    description="Delete a ticket and remove it from its submitter's history.",
    input_schema=delete_request_input_schema,
    admin=True,
)


def delete_request(ctx: ToolContext, arguments: dict) -> str:
    ticket_id = _ticket_id(arguments)
    if not ctx.store.delete_request(ticket_id):
        return not_found("ticket", f"ID: {ticket_id}")
    return dump({"id": ticket_id, "deleted": True})
