"""
Unit tests for shock magnitudes and coefficients.
"""

import pytest
from shock_model import (
    Coefficients,
    DefaultRule,
    credit_shock_amount,
    funding_shock_amount,
    is_defaulting,
    withdrawal_amount,
)


class TestShockAmounts:

    def test_funding_shock(self):
        assert funding_shock_amount(2500, 0.5) == 1250

    def test_credit_shock(self):
        assert credit_shock_amount(2500, 0.2) == pytest.approx(500)

    def test_withdrawal(self):
        assert withdrawal_amount(5000, 0.7) == pytest.approx(3500)

    def test_zero_inputs_give_zero(self):
        assert funding_shock_amount(0, 0.5) == 0
        assert credit_shock_amount(2500, 0) == 0
        assert withdrawal_amount(2500, 0) == 0


class TestDefaultRule:

    def test_negative_rule(self):
        assert is_defaulting(-0.01)
        assert not is_defaulting(0)
        assert not is_defaulting(10)

    def test_non_positive_rule(self):
        assert is_defaulting(0, DefaultRule.NON_POSITIVE)
        assert is_defaulting(-5, DefaultRule.NON_POSITIVE)
        assert not is_defaulting(0.01, DefaultRule.NON_POSITIVE)


class TestCoefficients:

    def test_uniform(self):
        coeffs = Coefficients.uniform(0.3, panic_rate=0.6)

        assert coeffs.lambda_c == 0.3
        assert coeffs.lambda_f == 0.3
        assert coeffs.panic_enabled
        assert coeffs.panic_rate == 0.6

    def test_defaults_disable_panic(self):
        coeffs = Coefficients(lambda_c=0.5, lambda_f=0.5)
        assert not coeffs.panic_enabled
        assert coeffs.panic_rate == 0.0

    def test_negative_lambda_rejected(self):
        with pytest.raises(ValueError):
            Coefficients(lambda_c=-0.1, lambda_f=0.5)

    def test_panic_rate_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            Coefficients.uniform(0.5, panic_rate=1.5)

    def test_frozen(self):
        coeffs = Coefficients.uniform(0.5)
        with pytest.raises(AttributeError):
            coeffs.lambda_c = 0.9
