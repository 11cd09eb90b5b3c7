"""Result dataclasses for transaction simulation and max-amount solving."""

from dataclasses import dataclass
from enum import Enum

from aries_risk.position.risk import HealthStatus


class TransactionType(str, Enum):
    SUPPLY = "supply"
    WITHDRAW = "withdraw"
    BORROW = "borrow"
    REPAY = "repay"


@dataclass(frozen=True)
class HealthFactorSimulation:
    """Before/after health factor for a hypothetical transaction.

    Attributes:
        action: The simulated transaction type.
        current_health_factor: HF of the positions as supplied.
        projected_health_factor: HF after applying the transaction.
        change: projected - current (nan-free; inf - inf is reported as 0).
        change_percent: change / current * 100, or 0 when current is inf or 0.
        current_status: Classification of the current HF.
        projected_status: Classification of the projected HF.
        total_collateral_usd: Deposit value after the transaction.
        total_borrow_usd: Borrow value after the transaction.
        is_safe: True if the projected HF is at or above the liquidation line.
        warning: Human-readable risk note, if any.
    """

    action: TransactionType
    current_health_factor: float
    projected_health_factor: float
    change: float
    change_percent: float
    current_status: HealthStatus
    projected_status: HealthStatus
    total_collateral_usd: float
    total_borrow_usd: float
    is_safe: bool
    warning: str | None = None


@dataclass(frozen=True)
class MaxSafeAmount:
    """Largest withdraw or borrow that keeps HF at or above a target."""

    max_amount: int  # Base units, floored
    max_amount_display: float  # Whole-token units
    max_amount_usd: float
    resulting_health_factor: float
    target_health_factor: float
