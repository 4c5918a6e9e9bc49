"""
Server wall-clock "today". Patched in tests to pin the calendar.
"""

from datetime import date


def today() -> date:
    return date.today()
