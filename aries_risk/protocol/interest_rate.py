"""Aries two-slope (kinked) interest rate model.

Rates are annual decimals (0.05 = 5%). Below the optimal utilization the
borrow rate climbs linearly from the min rate to the optimal rate; above it,
it climbs steeply from the optimal rate to the max rate at 100% utilization.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from aries_risk.data.constants import DAYS_PER_YEAR
from aries_risk.data.interfaces import InterestRateConfig, Reserve, ReserveState


@dataclass(frozen=True)
class ReserveRates:
    """Utilization and annual rates for a reserve."""

    utilization: float
    borrow_apr: float
    supply_apr: float


def calculate_utilization(total_borrowed: float, total_cash: float) -> float:
    """U = borrowed / (cash + borrowed); 0 for an empty pool."""
    total_liquidity = total_cash + total_borrowed
    if total_liquidity <= 0:
        return 0.0
    return total_borrowed / total_liquidity


def calculate_borrow_apr(utilization: float, config: InterestRateConfig) -> float:
    """Compute the borrow APR for a given utilization.

    Args:
        utilization: Pool utilization ratio, clamped to [0, 1].
        config: Kinked curve parameters.

    Returns:
        Annual borrow rate as a decimal.
    """
    u = max(0.0, min(1.0, utilization))
    u_opt = config.optimal_utilization

    if u <= u_opt:
        return config.min_borrow_rate + (
            config.optimal_borrow_rate - config.min_borrow_rate
        ) * (u / u_opt)
    excess = (u - u_opt) / (1.0 - u_opt)
    return config.optimal_borrow_rate + (
        config.max_borrow_rate - config.optimal_borrow_rate
    ) * excess


def calculate_supply_apr(
    borrow_apr: float, utilization: float, reserve_factor: float
) -> float:
    """Supply APR = borrow APR * U * (1 - reserve_factor).

    Suppliers only earn on the borrowed share of the pool, minus the
    protocol's cut.
    """
    return borrow_apr * utilization * (1.0 - reserve_factor)


def calculate_reserve_aprs(
    state: ReserveState,
    config: InterestRateConfig,
    reserve_factor: float,
) -> ReserveRates:
    """Utilization, borrow and supply APR from pool totals."""
    utilization = calculate_utilization(state.total_borrowed, state.total_cash)
    borrow_apr = calculate_borrow_apr(utilization, config)
    return ReserveRates(
        utilization=utilization,
        borrow_apr=borrow_apr,
        supply_apr=calculate_supply_apr(borrow_apr, utilization, reserve_factor),
    )


def apr_to_apy(apr: float, compounding_periods: int = DAYS_PER_YEAR) -> float:
    """APY = (1 + APR/n)^n - 1."""
    return (1.0 + apr / compounding_periods) ** compounding_periods - 1.0


def apy_to_apr(apy: float, compounding_periods: int = DAYS_PER_YEAR) -> float:
    """Inverse of apr_to_apy."""
    return ((1.0 + apy) ** (1.0 / compounding_periods) - 1.0) * compounding_periods


class InterestRateModel:
    """Kinked interest rate model for a single reserve."""

    def __init__(self, config: InterestRateConfig, reserve_factor: float = 0.0) -> None:
        self.config = config
        self.reserve_factor = reserve_factor

    @classmethod
    def from_reserve(cls, reserve: Reserve) -> "InterestRateModel":
        return cls(reserve.interest_rate_config, reserve.reserve_factor)

    def borrow_rate(self, utilization: float) -> float:
        return calculate_borrow_apr(utilization, self.config)

    def supply_rate(self, utilization: float) -> float:
        """Supply rate with utilization clamped to [0, 1] to match borrow_rate."""
        utilization = max(0.0, min(1.0, utilization))
        return calculate_supply_apr(
            self.borrow_rate(utilization), utilization, self.reserve_factor
        )

    def rate_curve(self, n_points: int = 200) -> pd.DataFrame:
        """Generate the full rate curve for plotting.

        Returns:
            DataFrame with columns: utilization, borrow_rate, supply_rate
        """
        utilizations = np.linspace(0, 1, n_points)
        borrow_rates = [self.borrow_rate(u) for u in utilizations]
        supply_rates = [self.supply_rate(u) for u in utilizations]

        return pd.DataFrame(
            {
                "utilization": utilizations,
                "borrow_rate": borrow_rates,
                "supply_rate": supply_rates,
            }
        )


def reserve_rates(reserve: Reserve) -> ReserveRates:
    """Current rates of a reserve snapshot."""
    model = InterestRateModel.from_reserve(reserve)
    return ReserveRates(
        utilization=reserve.utilization,
        borrow_apr=model.borrow_rate(reserve.utilization),
        supply_apr=model.supply_rate(reserve.utilization),
    )
