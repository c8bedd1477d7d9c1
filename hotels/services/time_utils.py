"""
time_utils.py
-------------
Helpers to turn "HH:MM" wall-clock strings into timezone-aware datetimes and
back, using Django's current timezone.
"""

from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_datetime


def parse_hhmm(value: str) -> time:
    """
    Parse "HH:MM" into a time object.

    Raises:
        ValueError: if the string is not a valid 24h wall-clock time.
    """
    h, m = (value or "").strip().split(":")
    return time(int(h), int(m))


def make_aware(dt_naive: datetime):
    """
    Convert a naive datetime to an aware one using Django's current timezone.
    """
    if timezone.is_aware(dt_naive):
        return dt_naive
    return timezone.make_aware(dt_naive, timezone.get_current_timezone())


def local_day(now=None):
    """Date of 'now' (defaults to the current instant) in the current timezone."""
    now = now or timezone.now()
    if timezone.is_naive(now):
        now = make_aware(now)
    return timezone.localtime(now).date()


def combine(day, hhmm: str):
    """Merge a wall-clock "HH:MM" onto a calendar date -> aware datetime."""
    t = parse_hhmm(hhmm)
    return make_aware(datetime(day.year, day.month, day.day, t.hour, t.minute, 0))


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp stored in a record.
    Returns None when the value is missing or malformed.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        dt = parse_datetime(value)
    except ValueError:
        return None
    if dt is None:
        return None
    return make_aware(dt)
