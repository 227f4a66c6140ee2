"""
Utility functions for the application.
"""
from typing import Any, Dict
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo


def format_date_br(value: date) -> str:
    """Format a date the way recipients read it (dd/MM/yyyy)."""
    return value.strftime("%d/%m/%Y")


def local_today(tz_name: str, now: datetime = None) -> date:
    """Today's calendar date in the given timezone."""
    tz = ZoneInfo(tz_name)
    current = now.astimezone(tz) if now else datetime.now(tz)
    return current.date()


def yesterday(tz_name: str, now: datetime = None) -> date:
    """The calendar day before today in the given timezone."""
    return local_today(tz_name, now) - timedelta(days=1)


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
