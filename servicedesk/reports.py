"""Read-only statistics over a RequestManager."""

from collections import Counter
from typing import Optional

from servicedesk.schema import PRIORITIES, STATUSES, ServiceRequest
from servicedesk.store import RequestManager


def priority_rank(priority: Optional[str]) -> int:
    """CRITICAL=0 .. LOW=3; anything unknown sorts with LOW."""
    value = (priority or "").upper()
    return PRIORITIES.index(value) if value in PRIORITIES else len(PRIORITIES) - 1


SORT_KEYS = {
    "created": lambda r: r.created_date,
    "priority": lambda r: priority_rank(r.priority),
    "status": lambda r: r.status,
}


def sort_requests(requests: list[ServiceRequest], key: str) -> list[ServiceRequest]:
    if key == "none":
        return list(requests)
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key}")
    return sorted(requests, key=SORT_KEYS[key])


def summary_statistics(store: RequestManager) -> dict[str, int]:
    counts = Counter(r.status for r in store.list_all())
    summary = {"total": sum(counts.values())}
    for status in STATUSES:
        summary[status] = counts.get(status, 0)
    return summary


def count_by_category(store: RequestManager) -> dict[str, int]:
    counts = Counter(r.category for r in store.list_all())
    return dict(sorted(counts.items()))


def count_by_priority(store: RequestManager) -> dict[str, int]:
    counts = Counter(r.priority for r in store.list_all())
    return dict(sorted(counts.items(), key=lambda item: priority_rank(item[0])))


def average_resolution_minutes(store: RequestManager) -> Optional[float]:
    """Mean whole minutes from creation to first resolution, or None."""
    resolved = [r for r in store.list_all() if r.resolved_date is not None]
    if not resolved:
        return None
    minutes = [
        int((r.resolved_date - r.created_date).total_seconds() // 60) for r in resolved
    ]
    return sum(minutes) / len(minutes)
