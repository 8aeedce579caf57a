"""
store.py — In-memory entity store for users and service requests
=================================================================
RequestManager is the one place the catalog lives while the process
runs. Everything else (the file gateway, the backup manager, reports,
the command registry) is handed a RequestManager instance; there is no
module-level catalog.

What the store guarantees:
  - ticket IDs are REQ-NNN, strictly increasing, never reused; a delete
    does not give its number back
  - after a bulk load the sequence jumps past every number on disk
  - a user's request_history is kept in step with the tickets filed under
    their email, by construction (append on create, purge on delete)
  - resolved_date is stamped the first time a ticket reaches RESOLVED or
    CLOSED and is never cleared afterwards

Mutations only flip a dirty flag; writing to disk is the caller's call.
"""

import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Optional

from servicedesk.schema import (
    RESOLVED_STATUSES,
    TIMESTAMP_FORMAT,
    ServiceRequest,
    User,
)

logger = logging.getLogger(__name__)

TICKET_ID_FORMAT = "REQ-{:03d}"
TICKET_ID_PATTERN = re.compile(r"^REQ-(\d+)$")


class RequestManager:
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._requests: list[ServiceRequest] = []
        self._by_id: dict[str, ServiceRequest] = {}
        self._users: list[User] = []
        self._next_seq = 1
        self._changed = False

    # ── Dirty flag ────────────────────────────────────────────────────────────

    @property
    def has_changes(self) -> bool:
        return self._changed

    def mark_changed(self) -> None:
        self._changed = True

    def clear_changes(self) -> None:
        self._changed = False

    def now(self) -> datetime:
        """Current time from the injected clock, truncated to whole seconds."""
        return self._clock().replace(microsecond=0)

    # ── Users ─────────────────────────────────────────────────────────────────

    def create_user(self, name: str, dept: str, role: str, email: str, phone: str) -> User:
        """Create a user. Email uniqueness is *not* checked here; see
        find_or_create_user_by_email for the find-or-create path."""
        user = User(name=name, department=dept, role=role, email=email, phone=phone)
        self._users.append(user)
        self._changed = True
        logger.debug("Created user %s <%s>", user.user_id, user.email)
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        return next((u for u in self._users if u.email.lower() == wanted), None)

    def find_or_create_user_by_email(
        self, email: str, name: str, dept: str, role: str, phone: str
    ) -> User:
        user = self.find_user_by_email(email)
        if user is None:
            user = self.create_user(name, dept, role, email, phone)
        return user

    def list_users(self) -> list[User]:
        return list(self._users)

    def delete_user_by_email(self, email: str) -> bool:
        user = self.find_user_by_email(email)
        if user is None:
            return False
        if user.request_history:
            # tickets still point at this user
            return False
        self._users.remove(user)
        self._changed = True
        return True

    # ── Requests: mutations ───────────────────────────────────────────────────

    def preview_next_ticket_id(self) -> str:
        return TICKET_ID_FORMAT.format(self._next_seq)

    def create_request(
        self,
        user: Optional[User],
        category: str,
        priority: str,
        subject: str,
        description: str,
    ) -> ServiceRequest:
        ticket_id = TICKET_ID_FORMAT.format(self._next_seq)
        now = self.now()
        request = ServiceRequest(
            ticket_id=ticket_id,
            user_name=user.name if user else "",
            user_dept=user.department if user else "",
            user_email=user.email if user else "",
            user_phone=user.phone if user else "",
            category=category,
            priority=priority,
            subject=subject,
            description=description,
            status="OPEN",
            created_date=now,
            last_updated=now,
        )
        # only consume the number once the record validated
        self._next_seq += 1
        self._requests.append(request)
        self._by_id[ticket_id] = request
        if user is not None:
            user.request_history.append(ticket_id)
        self._changed = True
        logger.debug("Created request %s", ticket_id)
        return request

    def add_comment(self, request: ServiceRequest, text: Optional[str]) -> bool:
        """Append a timestamped comment. Blank text is dropped and nothing changes."""
        if text is None or not text.strip():
            return False
        now = self.now()
        request.comments.append(f"[{now.strftime(TIMESTAMP_FORMAT)}] {text}")
        if now > request.last_updated:
            request.last_updated = now
        self._changed = True
        return True

    def update_status(self, request: ServiceRequest, status: str, actor: Optional[str]) -> None:
        """Move a ticket to any of the four statuses.

        There is no transition table: OPEN -> IN_PROGRESS -> RESOLVED -> CLOSED is
        the usual path, but agents may set any status from any other (reopening a
        CLOSED ticket included).
        """
        request.status = status
        now = self.now()
        if now > request.last_updated:
            request.last_updated = now
        label = f"[STATUS] -> {status}"
        if actor:
            label += f" by {actor}"
        self.add_comment(request, label)
        if status in RESOLVED_STATUSES and request.resolved_date is None:
            request.resolved_date = now
        self._changed = True

    def assign_agent(self, request: ServiceRequest, agent_name: str) -> None:
        request.assigned_agent = agent_name
        self.add_comment(request, f"[ASSIGN] Assigned to {agent_name}")
        self._changed = True

    def record_resolution(self, request: ServiceRequest, notes: str) -> None:
        request.resolution_notes = notes
        self.add_comment(request, f"[RESOLVED] {notes}")
        self._changed = True

    def delete_request(self, ticket_id: str) -> bool:
        request = self._by_id.pop(ticket_id, None)
        if request is None:
            return False
        self._requests.remove(request)
        for user in self._users:
            user.request_history[:] = [t for t in user.request_history if t != ticket_id]
        self._changed = True
        return True

    # ── Requests: queries ─────────────────────────────────────────────────────
    # Every query hands back a fresh list; sorting or trimming it is safe.

    def find_by_id(self, ticket_id: str) -> Optional[ServiceRequest]:
        return self._by_id.get(ticket_id)

    def list_all(self) -> list[ServiceRequest]:
        return list(self._requests)

    def list_by_user_email(self, email: str) -> list[ServiceRequest]:
        wanted = email.strip().lower()
        return [r for r in self._requests if r.user_email.lower() == wanted]

    def list_by_assigned_agent(self, agent_name: str) -> list[ServiceRequest]:
        wanted = agent_name.strip().lower()
        return [
            r for r in self._requests
            if r.assigned_agent is not None and r.assigned_agent.lower() == wanted
        ]

    def filter_by_status(self, status: str) -> list[ServiceRequest]:
        return [r for r in self._requests if r.status.lower() == status.lower()]

    def filter_by_category(self, category: str) -> list[ServiceRequest]:
        return [r for r in self._requests if r.category.lower() == category.lower()]

    def filter_by_priority(self, priority: str) -> list[ServiceRequest]:
        return [r for r in self._requests if r.priority.lower() == priority.lower()]

    def filter_by_date_range(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[ServiceRequest]:
        """Tickets created within [start, end]; either bound may be omitted."""
        return [
            r for r in self._requests
            if (start is None or r.created_date >= start)
            and (end is None or r.created_date <= end)
        ]

    def search_by_keyword(self, keyword: str) -> list[ServiceRequest]:
        keyword = keyword.lower()
        return [
            r for r in self._requests
            if keyword in r.subject.lower() or keyword in r.description.lower()
        ]

    # ── Bulk load ─────────────────────────────────────────────────────────────

    def replace_all(self, users: Iterable[User], requests: Iterable[ServiceRequest]) -> None:
        """Swap in a whole catalog (used by the file gateway after a load)."""
        self._users = list(users)
        self._requests = []
        self._by_id = {}
        for request in requests:
            if request.ticket_id in self._by_id:
                logger.warning("Duplicate ticket %s ignored; keeping the first record", request.ticket_id)
                continue
            self._requests.append(request)
            self._by_id[request.ticket_id] = request
        self._calibrate_next_seq()
        self._changed = False
        logger.debug(
            "Catalog replaced: %d users, %d requests, next id %s",
            len(self._users), len(self._requests), self.preview_next_ticket_id(),
        )

    def _calibrate_next_seq(self) -> None:
        highest = 0
        for ticket_id in self._by_id:
            match = TICKET_ID_PATTERN.match(ticket_id)
            if match:
                highest = max(highest, int(match.group(1)))
        self._next_seq = max(self._next_seq, highest + 1)
