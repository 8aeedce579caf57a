import json

import pytest

from servicedesk.config import Settings
from servicedesk.errors import AccessDeniedError
from servicedesk.main import main
from servicedesk.tools import ToolContext, call_tool, tools


@pytest.fixture
def ctx(store, files, backups, tmp_path):
    return ToolContext(
        store=store,
        files=files,
        backups=backups,
        settings=Settings(data_dir=files.data_dir, export_dir=tmp_path / "exports"),
    )


@pytest.fixture
def admin_ctx(ctx):
    ctx.is_admin = True
    return ctx


def _call(ctx, name, /, **arguments):
    return json.loads(call_tool(ctx, name, arguments))


def _submit(ctx, email="sam@example.com", subject="Wi-Fi down"):
    return _call(
        ctx, "submit_request",
        email=email, name="Sam", department="Sales",
        category="IT Support - Network", priority="high",
        subject=subject, description="No signal on floor 2",
    )


class TestRegistry:
    def test_every_entry_is_keyed_by_its_name(self):
        for name, entry in tools.items():
            assert entry["tool"].name == name
            assert callable(entry["handler"])

    def test_unknown_command(self, ctx):
        with pytest.raises(ValueError):
            call_tool(ctx, "reboot", {})

    def test_missing_required_argument(self, ctx):
        with pytest.raises(ValueError, match="keyword"):
            call_tool(ctx, "search_requests", {})

    def test_admin_commands_need_the_pin(self, ctx):
        with pytest.raises(AccessDeniedError):
            call_tool(ctx, "list_requests", {})


class TestTicketCommands:
    def test_submit_creates_user_and_ticket(self, ctx):
        result = _submit(ctx)
        assert result["id"] == "REQ-001"
        assert result["priority"] == "HIGH"
        user = ctx.store.find_user_by_email("sam@example.com")
        assert user.role == "USER"
        assert user.request_history == ["REQ-001"]

    def test_submit_reuses_existing_user(self, ctx):
        _submit(ctx)
        _submit(ctx, email="SAM@example.com", subject="Again")
        assert len(ctx.store.list_users()) == 1

    def test_list_my_requests(self, ctx):
        _submit(ctx)
        result = _call(ctx, "list_my_requests", email="sam@example.com")
        assert result["count"] == 1
        assert "error" in _call(ctx, "list_my_requests", email="nobody@example.com")

    def test_user_comment_must_own_the_ticket(self, ctx):
        _submit(ctx)
        refused = _call(ctx, "add_comment", ticket_id="req-001", comment="hi", email="eve@example.com")
        assert "error" in refused
        accepted = _call(ctx, "add_comment", ticket_id="req-001", comment="any news?", email="sam@example.com")
        assert accepted["comment_added"].endswith("User: any news?")

    def test_comment_without_email_needs_admin(self, ctx):
        _submit(ctx)
        with pytest.raises(ValueError):
            call_tool(ctx, "add_comment", {"ticket_id": "REQ-001", "comment": "hi"})
        ctx.is_admin = True
        result = _call(ctx, "add_comment", ticket_id="REQ-001", comment="on it")
        assert result["comment_added"].endswith("Admin: on it")

    def test_missing_ticket_is_an_error_payload(self, ctx):
        assert "error" in _call(ctx, "get_request", ticket_id="REQ-404")

    def test_get_request_as_text(self, ctx):
        _submit(ctx)
        text = call_tool(ctx, "get_request", {"ticket_id": "REQ-001", "format": "text"})
        assert "Ticket ID: REQ-001" in text

    def test_resolve_with_note(self, admin_ctx):
        _submit(admin_ctx)
        result = _call(admin_ctx, "update_status", ticket_id="REQ-001", status="resolved", note="Replaced AP")
        assert result["old_status"] == "OPEN"
        assert result["new_status"] == "RESOLVED"
        assert result["resolved_date"] == "2026-10-19 09:00:00"
        assert admin_ctx.store.find_by_id("REQ-001").resolution_notes == "Replaced AP"

    def test_close_with_note_keeps_the_note(self, admin_ctx):
        _submit(admin_ctx)
        result = _call(admin_ctx, "update_status", ticket_id="REQ-001", status="CLOSED", note="Duplicate of REQ-000")
        assert result["new_status"] == "CLOSED"
        request = admin_ctx.store.find_by_id("REQ-001")
        assert request.resolution_notes == "Duplicate of REQ-000"
        assert request.comments[-1].endswith("[RESOLVED] Duplicate of REQ-000")

    def test_list_requests_filters_combine(self, admin_ctx):
        _submit(admin_ctx, subject="one")
        _submit(admin_ctx, subject="two")
        _call(admin_ctx, "assign_request", ticket_id="REQ-002", agent="Tom Wilson")
        _call(admin_ctx, "update_status", ticket_id="REQ-002", status="IN_PROGRESS")

        result = _call(admin_ctx, "list_requests", status="IN_PROGRESS", agent="tom wilson")
        assert [t["id"] for t in result["tickets"]] == ["REQ-002"]
        assert _call(admin_ctx, "list_requests", **{"from": "2026-10-19", "to": "2026-10-19"})["count"] == 2
        assert _call(admin_ctx, "list_requests", **{"from": "2026-10-20"})["count"] == 0

    def test_delete_request(self, admin_ctx):
        _submit(admin_ctx)
        assert _call(admin_ctx, "delete_request", ticket_id="REQ-001")["deleted"]
        assert "error" in _call(admin_ctx, "delete_request", ticket_id="REQ-001")


class TestUserAndCatalogCommands:
    def test_delete_user_with_tickets_is_refused(self, admin_ctx):
        _submit(admin_ctx)
        assert "error" in _call(admin_ctx, "delete_user", email="sam@example.com")
        _call(admin_ctx, "delete_request", ticket_id="REQ-001")
        assert _call(admin_ctx, "delete_user", email="sam@example.com")["deleted"]

    def test_create_and_list_users(self, admin_ctx):
        created = _call(admin_ctx, "create_user", name="Tom", department="IT", role="agent", email="tom@example.com")
        assert created["role"] == "AGENT"
        assert _call(admin_ctx, "list_users")["count"] == 1

    def test_summary_report(self, ctx):
        _submit(ctx)
        result = _call(ctx, "summary_report")
        assert result["summary"]["OPEN"] == 1
        assert result["average_resolution_minutes"] is None

    def test_backup_and_restore(self, admin_ctx):
        _submit(admin_ctx, subject="before backup")
        backup = _call(admin_ctx, "backup")
        assert backup["backup"].endswith("backup_20261019_090000")

        _submit(admin_ctx, subject="after backup")
        restored = _call(admin_ctx, "restore")
        assert restored["requests"] == 1

    def test_restore_without_backups_raises(self, admin_ctx):
        from servicedesk.errors import NoBackupError

        with pytest.raises(NoBackupError):
            call_tool(admin_ctx, "restore", {})

    def test_export_csv(self, admin_ctx):
        _submit(admin_ctx)
        result = _call(admin_ctx, "export_csv")
        assert result["exported"].endswith("requests.csv")


class TestCommandLine:
    @pytest.fixture(autouse=True)
    def workspace(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SERVICEDESK_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("SERVICEDESK_EXPORT_DIR", str(tmp_path / "exports"))
        monkeypatch.setenv("SERVICEDESK_ADMIN_PIN", "4321")
        return tmp_path

    def test_first_run_seeds_and_lists(self, capsys, workspace):
        assert main(["--pin", "4321", "list_requests"]) == 0
        result = json.loads(capsys.readouterr().out)
        assert result["count"] == 3
        assert (workspace / "data" / "users.txt").exists()

    def test_changes_are_saved(self, capsys):
        assert main([
            "submit_request", "email=kim@example.com", "category=Facilities - Access",
            "priority=LOW", "subject=Badge", "description=Badge reader dead",
        ]) == 0
        assert json.loads(capsys.readouterr().out)["id"] == "REQ-004"

        assert main(["list_my_requests", "email=kim@example.com"]) == 0
        assert json.loads(capsys.readouterr().out)["count"] == 1

    def test_wrong_pin_fails(self, capsys):
        assert main(["--pin", "0000", "list_requests"]) == 1
        assert "Invalid admin PIN" in capsys.readouterr().err

    def test_bad_argument_syntax_fails(self, capsys):
        assert main(["search_requests", "keyword"]) == 1
        assert "key=value" in capsys.readouterr().err

    def test_commands_listing(self, capsys):
        assert main(["commands"]) == 0
        out = capsys.readouterr().out
        assert "submit_request" in out
        assert "restore (admin)" in out
