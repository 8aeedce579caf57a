"""
schema.py — Pydantic models for the Service Desk catalog
=========================================================
These are the two record types that flow through the system: a User and
the ServiceRequest (ticket) they submit. Pydantic gives us validation of
the enumerated fields (role, status, priority, category) for free, and
field-for-field equality, which the persistence round trip relies on.

The ticket keeps a *snapshot* of the submitting user's contact details,
not a reference to the User object, so later edits to a user never
rewrite the history of tickets already filed.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["ADMIN", "AGENT", "USER"]
Status = Literal["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"]
Priority = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW"]
Category = Literal[
    "IT Support - Hardware",
    "IT Support - Software",
    "IT Support - Network",
    "Facilities - Maintenance",
    "Facilities - Repairs",
    "Facilities - Access",
    "HR Services - Benefits",
    "HR Services - Payroll",
    "HR Services - Policies",
    "General Services - Supplies",
    "General Services - Equipment",
    "General Services - Other",
]

ROLES: tuple[str, ...] = get_args(Role)
STATUSES: tuple[str, ...] = get_args(Status)
PRIORITIES: tuple[str, ...] = get_args(Priority)
CATEGORIES: tuple[str, ...] = get_args(Category)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Statuses that count as "resolved" for resolved_date stamping and reports.
RESOLVED_STATUSES = ("RESOLVED", "CLOSED")


def new_user_id() -> str:
    return str(uuid.uuid4())[:8].upper()


class User(BaseModel):
    user_id: str = Field(default_factory=new_user_id)
    name: str
    department: str
    role: Role = "USER"
    email: str
    phone: str = ""
    request_history: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"{self.user_id} | {self.name} | {self.department} | {self.role} | "
            f"{self.email} | {self.phone} | Tickets: {len(self.request_history)}"
        )


class ServiceRequest(BaseModel):
    # status, priority and category stay within their value sets after edits too
    model_config = ConfigDict(validate_assignment=True)

    ticket_id: str
    user_name: str = ""
    user_dept: str = ""
    user_email: str = ""
    user_phone: str = ""
    category: Category
    priority: Priority
    subject: str
    description: str
    status: Status = "OPEN"
    assigned_agent: Optional[str] = None
    created_date: datetime
    last_updated: datetime
    resolved_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    comments: list[str] = Field(default_factory=list)
