"""Unit tests for amortization schedule generation"""

import pytest
from datetime import date
from loan_gateway.domain.amortization import build_schedule


def test_build_schedule_rounds_each_period():
    """1000 at 12% APR over 3 months, cents rounded at every step"""
    result = build_schedule(1000, 12, 3, start_date=date(2024, 1, 15))

    assert result.monthly_payment == 340.02
    rows = [(e.period, e.payment, e.principal, e.interest, e.balance) for e in result.entries]
    assert rows == [
        (1, 340.02, 330.02, 10.00, 669.98),
        (2, 340.02, 333.32, 6.70, 336.66),
        (3, 340.03, 336.66, 3.37, 0.0),  # Final period absorbs rounding drift
    ]


def test_build_schedule_zero_rate():
    """Zero APR splits principal evenly with no interest"""
    result = build_schedule(1200, 0, 12, start_date=date(2024, 1, 1))

    assert result.monthly_payment == 100.0
    assert all(e.payment == 100.0 and e.interest == 0.0 for e in result.entries)
    assert result.entries[-1].balance == 0.0


def test_build_schedule_due_dates_step_calendar_months():
    """Month-end start clamps to shorter months without drifting"""
    result = build_schedule(1000, 24, 4, start_date=date(2024, 1, 31))

    assert [e.due_date for e in result.entries] == [
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
    ]


def test_build_schedule_defaults_to_today():
    result = build_schedule(500, 24, 1)
    assert result.entries[0].due_date > date.today()


@pytest.mark.parametrize(
    "principal,apr,term",
    [(1000, 12, 3), (51_234.56, 24, 12), (7_777.77, 18.5, 60), (250_000, 6, 360), (0.05, 24, 5), (10, 99, 1)],
)
def test_build_schedule_terminal_invariants(principal, apr, term):
    """Length equals term, final balance is zero, principal portions sum to the loan"""
    result = build_schedule(principal, apr, term, start_date=date(2024, 6, 1))

    assert len(result.entries) == term
    assert [e.period for e in result.entries] == list(range(1, term + 1))
    assert result.entries[-1].balance == 0
    assert sum(e.principal for e in result.entries) == pytest.approx(principal, abs=0.01)
    assert all(e.balance >= 0 for e in result.entries)


def test_build_schedule_rejects_empty_term():
    with pytest.raises(ValueError):
        build_schedule(1000, 24, 0)


def test_schedule_serializes_for_storage():
    result = build_schedule(1000, 12, 3, start_date=date(2024, 1, 15))
    stored = result.serialize()

    assert stored[0] == {
        "period": 1,
        "due_date": "2024-02-15",
        "payment": 340.02,
        "principal": 330.02,
        "interest": 10.0,
        "balance": 669.98,
    }
