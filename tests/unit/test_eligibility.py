"""Unit tests for affordability and max-loan calculation"""

import pytest
from loan_gateway.domain.eligibility import calculate_max_loan, eligible_tiers, rate_borrower
from loan_gateway.domain.models import LoanSettings, RatingFactors, RatingInputs

BASE = dict(
    income=20_000,
    dti_ratio=0.30,
    employment_multiplier=1.0,
    credit_multiplier=0.8,
    annual_percent=24,
    term_months=12,
)


def test_calculate_max_loan_reference_borrower():
    """20k income, 30% DTI, default credit multiplier, 24% APR over a year"""
    calc = calculate_max_loan(**BASE)

    assert calc.allowed_monthly == 4800.0
    assert calc.max_principal == pytest.approx(50_761.64, abs=0.05)


def test_calculate_max_loan_zero_rate():
    """Zero APR: principal is simply allowed_monthly * term"""
    calc = calculate_max_loan(
        income=5_000,
        dti_ratio=0.30,
        employment_multiplier=1.0,
        credit_multiplier=0.8,
        annual_percent=0,
        term_months=10,
    )

    assert calc.allowed_monthly == 1200.0
    assert calc.max_principal == 12_000.0


def test_calculate_max_loan_zero_income():
    calc = calculate_max_loan(**{**BASE, "income": 0})
    assert calc.allowed_monthly == 0
    assert calc.max_principal == 0


@pytest.mark.parametrize(
    "field,low,high",
    [
        ("income", 10_000, 10_001),
        ("dti_ratio", 0.2, 0.35),
        ("employment_multiplier", 0.5, 1.0),
        ("credit_multiplier", 0.8, 1.2),
    ],
)
def test_max_principal_is_monotonic(field, low, high):
    """Raising any affordability input never lowers the ceiling"""
    lower = calculate_max_loan(**{**BASE, field: low})
    higher = calculate_max_loan(**{**BASE, field: high})

    assert higher.max_principal >= lower.max_principal


def test_rate_borrower_uses_resolved_inputs():
    """Same numbers as calculate_max_loan when fed equivalent records"""
    calc = rate_borrower(
        RatingInputs(income=20_000, employment_status="Employed", credit_score=300),
        LoanSettings(dti_ratio=0.30, base_interest_rate=24),
        RatingFactors(employment_multiplier=1.0, credit_multiplier=0.8),
        term_months=12,
    )

    assert calc == calculate_max_loan(**BASE)


def test_eligible_tiers_thresholds():
    """Every tier whose threshold is met applies"""
    assert eligible_tiers(0) == []
    assert eligible_tiers(49_999.99) == []
    assert eligible_tiers(50_000) == ["tier1"]
    assert set(eligible_tiers(150_000)) == {"tier1", "tier2"}
    assert set(eligible_tiers(300_000)) == {"tier1", "tier2", "tier3"}
