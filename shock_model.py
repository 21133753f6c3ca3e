"""
Shock magnitudes and cascade coefficients.

Funding and credit shocks are losses: they only ever reduce the balance of
the bank they hit. Panic withdrawals are transfers between two solvent banks
and leave the system total unchanged.
"""

from dataclasses import dataclass
from enum import Enum


class DefaultRule(Enum):
    """When a solvent bank's balance counts as a default."""
    NEGATIVE = "negative"          # balance < 0
    NON_POSITIVE = "non_positive"  # balance <= 0


@dataclass(frozen=True)
class Coefficients:
    """
    Shock transmission parameters for one cascade.

    Attributes:
        lambda_c: Credit shock transmission rate
        lambda_f: Funding shock transmission rate
        panic_enabled: Whether defaults trigger bank runs on partners
        panic_rate: Fraction of an exposure withdrawn during a bank run
    """
    lambda_c: float
    lambda_f: float
    panic_enabled: bool = False
    panic_rate: float = 0.0

    def __post_init__(self):
        if self.lambda_c < 0 or self.lambda_f < 0:
            raise ValueError("Shock coefficients must be non-negative")
        if not 0 <= self.panic_rate <= 1:
            raise ValueError("Panic rate must be between 0 and 1")

    @classmethod
    def uniform(cls, lam: float, panic_rate: float = 0.0, panic_enabled: bool = True) -> "Coefficients":
        """Coefficients with the same rate for credit and funding shocks."""
        return cls(lambda_c=lam, lambda_f=lam, panic_enabled=panic_enabled, panic_rate=panic_rate)


def funding_shock_amount(exposure: float, lambda_f: float) -> float:
    """Loss passed on through an exposure held by a defaulted bank."""
    return exposure * lambda_f


def credit_shock_amount(exposure: float, lambda_c: float) -> float:
    """Loss borne by a bank holding an exposure to a defaulted bank."""
    return exposure * lambda_c


def withdrawal_amount(exposure: float, panic_rate: float) -> float:
    """Amount pulled back from a distressed partner during a bank run."""
    return exposure * panic_rate


def is_defaulting(balance: float, rule: DefaultRule = DefaultRule.NEGATIVE) -> bool:
    """
    Check whether a balance triggers default under the given rule.

    Args:
        balance: Current balance
        rule: Threshold convention (default: strictly negative)

    Returns:
        True if the bank should be declared bankrupt
    """
    if rule is DefaultRule.NON_POSITIVE:
        return balance <= 0
    return balance < 0
