"""Unit tests for money rounding"""

from loan_gateway.utils.money import round_money


def test_round_money_half_up_on_exact_ties():
    """0.125 is exactly representable and rounds up, unlike round()"""
    assert round_money(0.125) == 0.13
    assert round_money(-0.125) == -0.13


def test_round_money_uses_binary_value():
    """1.005 and 2.675 are stored just below the tie and round down"""
    assert round_money(1.005) == 1.0
    assert round_money(2.675) == 2.67


def test_round_money_plain_values():
    assert round_money(10.0) == 10.0
    assert round_money(340.02210) == 340.02
    assert round_money(4799.999) == 4800.0
