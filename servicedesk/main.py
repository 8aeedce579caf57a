"""
main.py — Command-line entry point
===================================
This is the glue file. For every invocation it:
  1. Loads settings (.env + environment) and configures logging
  2. Builds the RequestManager, FileHandler and BackupManager
  3. Loads the catalog, seeding sample data on a first run
  4. Dispatches one command through the tools registry
  5. Saves if the command changed anything, and prints the JSON result

Usage:
    servicedesk commands
    servicedesk submit_request email=sam@example.com category="IT Support - Network" \\
        priority=HIGH subject="Wi-Fi down" description=-     (description read from stdin)
    servicedesk --pin 1234 update_status ticket_id=REQ-004 status=RESOLVED note="Rebooted AP"
    servicedesk --pin 1234 backup
"""

import argparse
import logging
import sys
from typing import Optional

from servicedesk.backup import BackupManager
from servicedesk.config import Settings, load_settings
from servicedesk.data import seed_sample_data
from servicedesk.errors import AccessDeniedError, ServiceDeskError
from servicedesk.persistence import FileHandler
from servicedesk.store import RequestManager
from servicedesk.tools import ToolContext, call_tool, tools

logger = logging.getLogger("servicedesk")


def parse_arguments(pairs: list[str]) -> dict[str, str]:
    """Turn key=value tokens into a dict; a value of '-' is read from stdin."""
    arguments = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        arguments[key.strip()] = sys.stdin.read().rstrip("\n") if value == "-" else value
    return arguments


def build_context(settings: Settings, pin: Optional[str]) -> ToolContext:
    if pin is not None and pin != settings.admin_pin:
        raise AccessDeniedError("Invalid admin PIN")

    store = RequestManager()
    files = FileHandler(store, settings.data_dir)
    files.load_data()
    if not store.list_users() and not files.users_file.exists():
        logger.info("Empty catalog, seeding sample data")
        seed_sample_data(store)
        files.save_data()

    return ToolContext(
        store=store,
        files=files,
        backups=BackupManager(files),
        settings=settings,
        is_admin=pin is not None,
    )


def list_commands() -> str:
    lines = []
    for name, entry in tools.items():
        tool = entry["tool"]
        required = tool.input_schema.get("required", [])
        optional = [k for k in tool.input_schema.get("properties", {}) if k not in required]
        args = " ".join([f"{k}=..." for k in required] + [f"[{k}=...]" for k in optional])
        admin = " (admin)" if tool.admin else ""
        lines.append(f"{name}{admin} {args}\n    {tool.description}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="servicedesk",
        description="Service desk ticket catalog",
    )
    parser.add_argument("--pin", help="Admin PIN, required for admin commands")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log load/save/backup activity",
    )
    parser.add_argument("command", help="Command name, or 'commands' to list them")
    parser.add_argument("arguments", nargs="*", help="Command arguments as key=value")
    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(
        level=logging.INFO if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "commands":
        print(list_commands())
        return 0

    try:
        ctx = build_context(settings, args.pin)
        result = call_tool(ctx, args.command, parse_arguments(args.arguments))
        if ctx.store.has_changes:
            ctx.files.save_data()
    except (ServiceDeskError, ValueError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
