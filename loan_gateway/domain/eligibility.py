"""Affordability engine - core business logic for loan limits"""

from typing import List
from loan_gateway.domain.annuity import monthly_rate, principal_from_monthly
from loan_gateway.domain.models import LoanCalculation, LoanSettings, RatingFactors, RatingInputs
from loan_gateway.utils.money import round_money

# Combined deposit + savings balance needed for each advisory tier, highest first
BALANCE_TIERS = [
    (300_000, "tier3"),
    (150_000, "tier2"),
    (50_000, "tier1"),
]


def calculate_max_loan(
    income: float,
    dti_ratio: float,
    employment_multiplier: float,
    credit_multiplier: float,
    annual_percent: float,
    term_months: int,
) -> LoanCalculation:
    """
    Derive the affordable monthly payment and the largest principal it amortizes.

    allowed_monthly = income * dti_ratio * employment_multiplier * credit_multiplier
    max_principal   = principal_from_monthly(allowed_monthly, APR/12, term_months)

    Both figures are rounded to cents; max_principal is computed from the
    already rounded allowed_monthly.
    """
    allowed_monthly = round_money(income * dti_ratio * employment_multiplier * credit_multiplier)
    max_principal = principal_from_monthly(allowed_monthly, monthly_rate(annual_percent), term_months)
    return LoanCalculation(allowed_monthly=allowed_monthly, max_principal=round_money(max_principal))


def rate_borrower(
    inputs: RatingInputs,
    loan_settings: LoanSettings,
    factors: RatingFactors,
    term_months: int,
) -> LoanCalculation:
    """
    Main entry point: compute loan limits from resolved rating inputs.

    Shared by the advisory quote and the enforcing apply path.
    """
    return calculate_max_loan(
        income=inputs.income,
        dti_ratio=loan_settings.dti_ratio,
        employment_multiplier=factors.employment_multiplier,
        credit_multiplier=factors.credit_multiplier,
        annual_percent=loan_settings.base_interest_rate,
        term_months=term_months,
    )


def eligible_tiers(combined_balance: float) -> List[str]:
    """Every advisory tier whose balance threshold is met (not used for enforcement)"""
    return [tier for threshold, tier in BALANCE_TIERS if combined_balance >= threshold]
