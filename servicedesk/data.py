"""
data.py — Sample catalog for a first run
=========================================
When the data directory holds no users yet, the CLI seeds this small
catalog so there is something to list, search and report on. Every
record goes through RequestManager, so ticket numbering, history lists
and status comments come out exactly as they would for real submissions.
"""

from servicedesk.store import RequestManager


def seed_sample_data(store: RequestManager) -> None:
    # ── Users ─────────────────────────────────────────────────────────────────
    admin = store.create_user("Alice Admin", "IT", "ADMIN", "admin@example.com", "100-000")
    agent = store.create_user("Tom Wilson", "IT Support", "AGENT", "tom.wilson@example.com", "100-101")
    sarah = store.create_user("Sarah Connor", "Marketing", "USER", "sarah.connor@example.com", "100-201")
    john = store.create_user("John Smith", "Finance", "USER", "john.smith@example.com", "100-202")

    # ── Tickets ───────────────────────────────────────────────────────────────
    # One in progress with an agent, one untouched, one already resolved.

    crash = store.create_request(
        sarah, "IT Support - Software", "HIGH",
        "Laptop crashed", "Blue screen on startup, needs urgent fix",
    )
    store.update_status(crash, "IN_PROGRESS", agent.name)
    store.assign_agent(crash, agent.name)
    store.add_comment(crash, f"{agent.name}: Investigating BSOD.")

    store.create_request(
        john, "Facilities - Maintenance", "MEDIUM",
        "Air conditioner leaking", "Water dripping from AC unit in room 204",
    )

    payslip = store.create_request(
        sarah, "HR Services - Payroll", "LOW",
        "Payslip correction", "Incorrect tax calculation in June payslip",
    )
    store.update_status(payslip, "RESOLVED", admin.name)
    store.record_resolution(payslip, "Corrected payroll entry and reissued payslip")
