import csv

import pytest

from servicedesk import reports
from servicedesk.data import seed_sample_data
from servicedesk.export import CSV_HEADER, export_request_details, export_requests_csv, render_request


@pytest.fixture
def seeded(store):
    seed_sample_data(store)
    return store


class TestReports:
    def test_summary_statistics(self, seeded):
        assert reports.summary_statistics(seeded) == {
            "total": 3, "OPEN": 1, "IN_PROGRESS": 1, "RESOLVED": 1, "CLOSED": 0,
        }

    def test_count_by_category_is_sorted(self, seeded):
        assert list(reports.count_by_category(seeded)) == [
            "Facilities - Maintenance", "HR Services - Payroll", "IT Support - Software",
        ]

    def test_count_by_priority_follows_rank(self, seeded):
        assert reports.count_by_priority(seeded) == {"HIGH": 1, "MEDIUM": 1, "LOW": 1}
        assert list(reports.count_by_priority(seeded)) == ["HIGH", "MEDIUM", "LOW"]

    def test_average_resolution_minutes(self, store, clock, sarah):
        assert reports.average_resolution_minutes(store) is None
        first = store.create_request(sarah, "Facilities - Repairs", "HIGH", "Door", "Hinge broken")
        second = store.create_request(sarah, "Facilities - Repairs", "LOW", "Chair", "Wobbly")
        clock.advance(minutes=90)
        store.update_status(first, "RESOLVED", "admin")
        clock.advance(minutes=30)
        store.update_status(second, "CLOSED", "admin")
        assert reports.average_resolution_minutes(store) == 105.0

    def test_sort_by_priority(self, seeded):
        ordered = reports.sort_requests(seeded.list_all(), "priority")
        assert [r.priority for r in ordered] == ["HIGH", "MEDIUM", "LOW"]
        with pytest.raises(ValueError):
            reports.sort_requests(seeded.list_all(), "colour")

    def test_priority_rank(self):
        assert reports.priority_rank("critical") == 0
        assert reports.priority_rank(None) == 3


class TestExport:
    def test_csv_quotes_awkward_fields(self, store, tmp_path, sarah):
        store.create_request(
            sarah, "General Services - Other", "LOW",
            'Chairs, desks and a "standing" one', "multi\nline",
        )
        path = export_requests_csv(store, tmp_path / "exports")

        text = path.read_text(encoding="utf-8")
        assert '"Chairs, desks and a ""standing"" one"' in text
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_HEADER
        assert rows[1][0] == "REQ-001"
        assert rows[1][8] == 'Chairs, desks and a "standing" one'
        assert rows[1][9] == ""

    def test_render_request(self, seeded):
        text = render_request(seeded.find_by_id("REQ-003"))
        assert "Ticket ID: REQ-003" in text
        assert "Resolution Notes: Corrected payroll entry and reissued payslip" in text
        assert "Resolved: 2026-10-19 09:00:00" in text

        untouched = render_request(seeded.find_by_id("REQ-002"))
        assert "(None)" in untouched
        assert "Resolved:" not in untouched

    def test_export_request_details(self, seeded, tmp_path):
        request = seeded.find_by_id("REQ-001")
        path = export_request_details(request, tmp_path)
        assert path.name == "REQ-001.txt"
        assert path.read_text(encoding="utf-8") == render_request(request)
