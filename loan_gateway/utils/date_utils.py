"""Date manipulation utilities"""

from datetime import date
from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months (Jan 31 + 1 -> Feb 28/29)"""
    return from_date + relativedelta(months=months)
