"""Amortization schedule generation for fixed-rate monthly loans"""

from datetime import date
from typing import Optional
from loan_gateway.domain.annuity import monthly_payment, monthly_rate
from loan_gateway.domain.models import AmortizationEntry, AmortizationSchedule
from loan_gateway.utils.date_utils import add_months
from loan_gateway.utils.money import round_money


def build_schedule(
    principal: float,
    annual_percent: float,
    term_months: int,
    start_date: Optional[date] = None,
) -> AmortizationSchedule:
    """
    Build a period-by-period repayment schedule.

    Requirements:
    - Interest accrues on the running (rounded) balance each period
    - Every money value is rounded to cents at each step, not only at the end
    - Final period pays off whatever balance is left, absorbing rounding drift
    - Due dates fall one calendar month apart, starting one month after start_date

    Args:
        principal: Amount borrowed
        annual_percent: APR as a percent (24 means 24%)
        term_months: Number of monthly payments (must be >= 1)
        start_date: Origination date (default: today)

    Returns:
        AmortizationSchedule with the rounded nominal payment and term_months entries

    Example:
        1200 at 0% over 12 months -> twelve payments of 100.00, final balance 0.00
    """
    if term_months < 1:
        raise ValueError("Term must be at least one month")

    if start_date is None:
        start_date = date.today()

    rate = monthly_rate(annual_percent)
    # Unrounded payment drives the per-period split; only the reported figure is rounded
    level_payment = monthly_payment(principal, rate, term_months)

    balance = float(principal)
    entries = []
    for period in range(1, term_months + 1):
        interest = round_money(balance * rate)
        if period == term_months:
            principal_part = round_money(balance)
        else:
            principal_part = round_money(level_payment - interest)
        payment = round_money(principal_part + interest)
        balance = round_money(balance - principal_part)

        entries.append(
            AmortizationEntry(
                period=period,
                due_date=add_months(start_date, period),
                payment=payment,
                principal=principal_part,
                interest=interest,
                balance=balance if balance > 0 else 0.0,
            )
        )

    return AmortizationSchedule(monthly_payment=round_money(level_payment), entries=entries)
