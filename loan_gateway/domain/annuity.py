"""Annuity formulas for fixed-rate amortizing loans"""


def monthly_rate(annual_percent: float) -> float:
    """Convert an APR percent (24 -> 24%) to a monthly decimal rate (0.02)"""
    return (annual_percent / 100) / 12


def _check_terms(rate: float, term_months: int) -> None:
    if term_months < 1:
        raise ValueError("Term must be at least one month")
    if rate < 0:
        raise ValueError("Rate must not be negative")


def monthly_payment(principal: float, rate: float, term_months: int) -> float:
    """
    Level monthly payment that amortizes principal over term_months.

        M = P * r * (1 + r)^n / ((1 + r)^n - 1)

    A zero rate degenerates to straight-line repayment P / n.
    """
    _check_terms(rate, term_months)
    if rate == 0:
        return principal / term_months
    growth = (1 + rate) ** term_months
    return principal * rate * growth / (growth - 1)


def principal_from_monthly(payment: float, rate: float, term_months: int) -> float:
    """
    Principal that a level monthly payment can amortize (inverse of monthly_payment).

        P = M * ((1 + r)^n - 1) / (r * (1 + r)^n)
    """
    _check_terms(rate, term_months)
    if rate == 0:
        return payment * term_months
    growth = (1 + rate) ** term_months
    return payment * (growth - 1) / (rate * growth)
