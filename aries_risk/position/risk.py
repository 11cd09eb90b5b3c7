"""Health factor, LTV and borrowing power for a user's portfolio.

Health factor (two-sided risk adjustment):

    HF = sum(deposit_value * liquidation_threshold)
         / sum(borrow_value / borrow_factor)

HF < 1.0 makes the position eligible for liquidation. A portfolio without
debt has an infinite health factor.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from aries_risk.data.constants import (
    DANGER_HEALTH_FACTOR,
    HEALTH_FACTOR_DISPLAY_CAP,
    LIQUIDATION_HEALTH_FACTOR,
    WARNING_HEALTH_FACTOR,
)
from aries_risk.data.interfaces import BorrowPosition, DepositPosition


class HealthStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"
    LIQUIDATABLE = "liquidatable"


@dataclass(frozen=True)
class RiskThresholds:
    """Health factor boundaries used to classify a position.

    Attributes:
        liquidation: Below this the position is liquidatable.
        danger: Below this (and at or above ``liquidation``) it is in danger.
        warning: Below this (and at or above ``danger``) it gets a warning.
    """

    liquidation: float = LIQUIDATION_HEALTH_FACTOR
    danger: float = DANGER_HEALTH_FACTOR
    warning: float = WARNING_HEALTH_FACTOR


DEFAULT_THRESHOLDS = RiskThresholds()


@dataclass(frozen=True)
class RiskMetrics:
    """Portfolio risk snapshot. All values in USD unless noted."""

    health_factor: float
    current_ltv: float  # Debt / collateral
    liquidation_ltv: float  # Value-weighted liquidation threshold
    borrowing_power: float
    borrow_capacity_usd: float  # Borrowing power not yet used
    borrow_capacity_used: float  # Fraction of borrowing power used
    status: HealthStatus
    total_collateral_usd: float
    total_borrow_usd: float
    weighted_collateral_usd: float  # HF numerator
    adjusted_borrow_usd: float  # HF denominator


def total_deposit_value(deposits: Sequence[DepositPosition]) -> float:
    return sum(d.value_usd for d in deposits)


def total_borrow_value(borrows: Sequence[BorrowPosition]) -> float:
    return sum(b.value_usd for b in borrows)


def calculate_weighted_collateral(deposits: Sequence[DepositPosition]) -> float:
    """sum(value * liquidation_threshold)."""
    return sum(d.value_usd * d.liquidation_threshold for d in deposits)


def calculate_adjusted_borrow(borrows: Sequence[BorrowPosition]) -> float:
    """sum(value / borrow_factor)."""
    return sum(b.value_usd / b.borrow_factor for b in borrows)


def calculate_health_factor(
    deposits: Sequence[DepositPosition], borrows: Sequence[BorrowPosition]
) -> float:
    """Compute the portfolio health factor.

    Returns:
        Health factor, or inf when there is no debt.
    """
    adjusted_borrow = calculate_adjusted_borrow(borrows)
    if adjusted_borrow <= 0:
        return float("inf")
    return calculate_weighted_collateral(deposits) / adjusted_borrow


def calculate_current_ltv(
    deposits: Sequence[DepositPosition], borrows: Sequence[BorrowPosition]
) -> float:
    """Debt / collateral. Returns 0 when there is no collateral."""
    collateral = total_deposit_value(deposits)
    if collateral <= 0:
        return 0.0
    return total_borrow_value(borrows) / collateral


def calculate_borrowing_power(deposits: Sequence[DepositPosition]) -> float:
    """Maximum USD borrowable against the deposits: sum(value * LTV).

    Independent of current borrows.
    """
    return sum(d.value_usd * d.loan_to_value for d in deposits)


def health_factor_status(
    health_factor: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS
) -> HealthStatus:
    if health_factor < thresholds.liquidation:
        return HealthStatus.LIQUIDATABLE
    if health_factor < thresholds.danger:
        return HealthStatus.DANGER
    if health_factor < thresholds.warning:
        return HealthStatus.WARNING
    return HealthStatus.SAFE


def calculate_portfolio_risk(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskMetrics:
    """Combine health factor, LTV and borrowing power into one snapshot."""
    total_collateral = total_deposit_value(deposits)
    total_borrow = total_borrow_value(borrows)
    weighted_collateral = calculate_weighted_collateral(deposits)
    borrowing_power = calculate_borrowing_power(deposits)
    health_factor = calculate_health_factor(deposits, borrows)

    return RiskMetrics(
        health_factor=health_factor,
        current_ltv=calculate_current_ltv(deposits, borrows),
        liquidation_ltv=(
            weighted_collateral / total_collateral if total_collateral > 0 else 0.0
        ),
        borrowing_power=borrowing_power,
        borrow_capacity_usd=max(0.0, borrowing_power - total_borrow),
        borrow_capacity_used=(
            total_borrow / borrowing_power if borrowing_power > 0 else 0.0
        ),
        status=health_factor_status(health_factor, thresholds),
        total_collateral_usd=total_collateral,
        total_borrow_usd=total_borrow,
        weighted_collateral_usd=weighted_collateral,
        adjusted_borrow_usd=calculate_adjusted_borrow(borrows),
    )


def format_health_factor(health_factor: float) -> str:
    if math.isinf(health_factor) or health_factor > HEALTH_FACTOR_DISPLAY_CAP:
        return "∞"
    return f"{health_factor:.2f}"
