import calendar
from datetime import datetime, timedelta
from typing import Optional


def add_months(dt: datetime, months: int) -> datetime:
    """Same day next month(s), clamped to the month's last day (Jan 31 -> Feb 28/29)"""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def next_occurrence(dt: datetime, pattern: str) -> datetime:
    if pattern == "daily":
        return dt + timedelta(days=1)
    if pattern == "weekly":
        return dt + timedelta(weeks=1)
    if pattern == "monthly":
        return add_months(dt, 1)
    if pattern == "yearly":
        return add_months(dt, 12)
    raise ValueError(f"Unknown recurrence pattern: {pattern}")


def next_due_date(due_date: datetime, pattern: str, end_date: Optional[datetime] = None) -> Optional[datetime]:
    """Due date of the next occurrence, or None once it would pass the recurrence end"""
    next_due = next_occurrence(due_date, pattern)
    if end_date is not None and next_due > end_date:
        return None
    return next_due
