from servicedesk.errors import AccessDeniedError
from servicedesk.tools.catalog import (
    backup, backup_tool,
    export_csv, export_csv_tool,
    export_request, export_request_tool,
    load, load_tool,
    restore, restore_tool,
    save, save_tool,
    summary_report, summary_report_tool,
)
from servicedesk.tools.common import ToolContext, ToolSpec
from servicedesk.tools.tickets import (
    add_comment, add_comment_tool,
    assign_request, assign_request_tool,
    delete_request, delete_request_tool,
    get_request, get_request_tool,
    list_my_requests, list_my_requests_tool,
    list_requests, list_requests_tool,
    search_requests, search_requests_tool,
    submit_request, submit_request_tool,
    update_status, update_status_tool,
)
from servicedesk.tools.users import (
    create_user, create_user_tool,
    delete_user, delete_user_tool,
    get_user, get_user_tool,
    list_users, list_users_tool,
)

# Registry mapping command name -> {"tool": ToolSpec, "handler": callable}
# To add a command: write its descriptor + handler in the matching module,
# then add one entry here. main.py needs no changes.
tools = {
    submit_request_tool.name:   {"tool": submit_request_tool,   "handler": submit_request},
    list_my_requests_tool.name: {"tool": list_my_requests_tool, "handler": list_my_requests},
    search_requests_tool.name:  {"tool": search_requests_tool,  "handler": search_requests},
    add_comment_tool.name:      {"tool": add_comment_tool,      "handler": add_comment},
    get_request_tool.name:      {"tool": get_request_tool,      "handler": get_request},
    list_requests_tool.name:    {"tool": list_requests_tool,    "handler": list_requests},
    assign_request_tool.name:   {"tool": assign_request_tool,   "handler": assign_request},
    update_status_tool.name:    {"tool": update_status_tool,    "handler": update_status},
    delete_request_tool.name:   {"tool": delete_request_tool,   "handler": delete_request},
    get_user_tool.name:         {"tool": get_user_tool,         "handler": get_user},
    create_user_tool.name:      {"tool": create_user_tool,      "handler": create_user},
    list_users_tool.name:       {"tool": list_users_tool,       "handler": list_users},
    delete_user_tool.name:      {"tool": delete_user_tool,      "handler": delete_user},
    summary_report_tool.name:   {"tool": summary_report_tool,   "handler": summary_report},
    export_csv_tool.name:       {"tool": export_csv_tool,       "handler": export_csv},
    export_request_tool.name:   {"tool": export_request_tool,   "handler": export_request},
    save_tool.name:             {"tool": save_tool,             "handler": save},
    load_tool.name:             {"tool": load_tool,             "handler": load},
    backup_tool.name:           {"tool": backup_tool,           "handler": backup},
    restore_tool.name:          {"tool": restore_tool,          "handler": restore},
}


def call_tool(ctx: ToolContext, name: str, arguments: dict) -> str:
    """Dispatch a command to its handler, enforcing the admin gate."""
    if name not in tools:
        raise ValueError(f"Unknown command: {name}")
    tool: ToolSpec = tools[name]["tool"]
    if tool.admin and not ctx.is_admin:
        raise AccessDeniedError(f"{name} requires the admin PIN")
    missing = [key for key in tool.input_schema.get("required", []) if not arguments.get(key)]
    if missing:
        raise ValueError(f"{name}: missing argument(s): {', '.join(missing)}")
    return tools[name]["handler"](ctx, arguments)
