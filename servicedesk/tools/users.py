"""
tools/users.py — Commands for user management
==============================================
Four commands:
  - get_user    : look a user up by email
  - create_user : admin, add a user with an explicit role
  - list_users  : admin, every user with their ticket count
  - delete_user : admin, remove a user who has no tickets on file
"""

from servicedesk.schema import ROLES, User
from servicedesk.tools.common import ToolContext, ToolSpec, dump, not_found, required_arg


def _user_payload(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "name": user.name,
        "department": user.department,
        "role": user.role,
        "email": user.email,
        "phone": user.phone,
        "tickets": list(user.request_history),
    }


# ── get_user ──────────────────────────────────────────────────────────────────

get_user_input_schema = {
    "type": "object",
    "properties": {
        "email": {"type": "string", "description": "Email of the user to look up"},
    },
    "required": ["email"],
}

get_user_tool = ToolSpec(
    name="get_user",
    description="Retrieve a user's profile and ticket history by email.",
    input_schema=get_user_input_schema,
)


def get_user(ctx: ToolContext, arguments: dict) -> str:
    email = required_arg(arguments, "email")
    user = ctx.store.find_user_by_email(email)
    if user is None:
        return not_found("user", f"email: {email}")
    return dump(_user_payload(user))


# ── create_user ───────────────────────────────────────────────────────────────

create_user_input_schema = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "department": {"type": "string"},
        "role": {"type": "string", "enum": list(ROLES)},
        "email": {"type": "string"},
        "phone": {"type": "string"},
    },
    "required": ["name", "department", "role", "email"],
}

create_user_tool = ToolSpec(
    name="create_user",
    description="Create a user. Agents need an AGENT user to be listed as assignees.",
    input_schema=create_user_input_schema,
    admin=True,
)


def create_user(ctx: ToolContext, arguments: dict) -> str:
    user = ctx.store.create_user(
        required_arg(arguments, "name"),
        required_arg(arguments, "department"),
        required_arg(arguments, "role").upper(),
        required_arg(arguments, "email"),
        arguments.get("phone", ""),
    )
    return dump(_user_payload(user))


# ── list_users ────────────────────────────────────────────────────────────────

list_users_tool = ToolSpec(
    name="list_users",
    description="List all users.",
    input_schema={"type": "object", "properties": {}, "required": []},
    admin=True,
)


def list_users(ctx: ToolContext, arguments: dict) -> str:
    users = ctx.store.list_users()
    return dump({"count": len(users), "users": [_user_payload(u) for u in users]})


# ── delete_user ───────────────────────────────────────────────────────────────
# Refused while the user still has tickets, so no ticket loses its owner.

delete_user_input_schema = {
    "type": "object",
    "properties": {
        "email": {"type": "string", "description": "Email of the user to delete"},
    },
    "required": ["email"],
}

delete_user_tool = ToolSpec(
    name="delete_user",
    description="Delete a user by email. Fails if the user has any tickets.",
    input_schema=delete_user_input_schema,
    admin=True,
)


def delete_user(ctx: ToolContext, arguments: dict) -> str:
    email = required_arg(arguments, "email")
    user = ctx.store.find_user_by_email(email)
    if user is None:
        return not_found("user", f"email: {email}")
    if not ctx.store.delete_user_by_email(email):
        return dump({
            "error": f"{email} still has {len(user.request_history)} ticket(s) on file",
        })
    return dump({"email": email, "deleted": True})
