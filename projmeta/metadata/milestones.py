"""Derived milestone statistics. Always computed, never stored."""
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from projmeta.schemas.metadata import Milestone


def _due_instant(value: str) -> Optional[datetime]:
    # A milestone falls due at UTC midnight of its date
    try:
        day = date.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def milestone_stats(
    milestones: Iterable[Union[Milestone, Mapping[str, Any]]],
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Count total, completed, upcoming and overdue milestones.

    Open milestones are upcoming when their date lies after now and overdue
    when it lies before. A milestone whose date is not a real calendar date
    (e.g. 2024-02-30) counts toward total only.
    """
    now = now or datetime.now(timezone.utc)
    stats = {"total": 0, "completed": 0, "upcoming": 0, "overdue": 0}

    for milestone in milestones:
        if isinstance(milestone, Milestone):
            milestone = milestone.model_dump()
        stats["total"] += 1
        if milestone.get("completed"):
            stats["completed"] += 1
            continue

        due = _due_instant(milestone.get("date"))
        if due is None:
            continue
        if due > now:
            stats["upcoming"] += 1
        elif due < now:
            stats["overdue"] += 1

    return stats
