# utils/dates.py
"""
Calendar helpers shared by the lifecycle engine and the dashboards.

All month arithmetic is done in whole calendar months with
``relativedelta``: the year rolls over and the day is clamped to the
end of the target month (2025-01-31 + 1 month -> 2025-02-28).
"""
from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(start: date, months: int) -> date:
     """Return ``start`` shifted by ``months`` calendar months."""
     return start + relativedelta(months=months)


def add_years(start: date, years: int) -> date:
     return start + relativedelta(years=years)


def month_span(start: date, end: date) -> int:
     """
     Whole-month distance between two dates, ignoring the day of month.

     2025-03-01 -> 2025-05-01 is 2, and so is 2025-03-31 -> 2025-05-01.
     """
     return (end.year - start.year) * 12 + (end.month - start.month)


def month_key(day: date) -> str:
     """Billing month key in ``YYYY-MM`` form."""
     return f"{day.year:04d}-{day.month:02d}"


def first_of_month(day: date) -> date:
     return day.replace(day=1)

