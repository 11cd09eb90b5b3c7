"""Value-weighted net APR / APY across supply and borrow positions.

APR inputs are annual decimals (0.05 = 5%). Reward APR adds to supply yield
and offsets borrow cost.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from aries_risk.data.constants import DAYS_PER_YEAR
from aries_risk.data.interfaces import BorrowPosition, DepositPosition
from aries_risk.protocol.interest_rate import apr_to_apy


@dataclass(frozen=True)
class SupplyYield:
    """A supply position as seen by the APR aggregator."""

    coin_type: str
    amount_usd: float
    supply_apr: float
    reward_apr: float = 0.0


@dataclass(frozen=True)
class BorrowYield:
    """A borrow position as seen by the APR aggregator."""

    coin_type: str
    amount_usd: float
    borrow_apr: float
    reward_apr: float = 0.0  # Reduces the effective borrow cost


@dataclass(frozen=True)
class NetAPRResult:
    """Portfolio APR summary. Earnings and costs are annual USD."""

    net_apr: float  # Percent of total supplied + borrowed value
    total_supply_apr: float  # Weighted, rewards included
    total_borrow_apr: float  # Weighted, net of rewards
    total_reward_apr: float
    supply_earnings: float
    borrow_costs: float
    reward_earnings: float
    net_earnings: float


_LEVERAGE_MULTIPLIERS = {
    "conservative": 0.5,
    "moderate": 0.7,
    "aggressive": 0.9,
}


def supply_yields_from_deposits(
    deposits: Sequence[DepositPosition],
    reward_aprs: Mapping[str, float] | None = None,
) -> list[SupplyYield]:
    """Build aggregator inputs from deposits using each deposit's current APR."""
    rewards = reward_aprs or {}
    return [
        SupplyYield(
            coin_type=d.coin_type,
            amount_usd=d.value_usd,
            supply_apr=d.current_apr,
            reward_apr=rewards.get(d.coin_type, 0.0),
        )
        for d in deposits
    ]


def borrow_yields_from_borrows(
    borrows: Sequence[BorrowPosition],
    reward_aprs: Mapping[str, float] | None = None,
) -> list[BorrowYield]:
    rewards = reward_aprs or {}
    return [
        BorrowYield(
            coin_type=b.coin_type,
            amount_usd=b.value_usd,
            borrow_apr=b.current_apr,
            reward_apr=rewards.get(b.coin_type, 0.0),
        )
        for b in borrows
    ]


def calculate_weighted_supply_apr(supplies: Sequence[SupplyYield]) -> float:
    """sum(usd * (supply_apr + reward_apr)) / sum(usd); 0 without supply."""
    total = sum(s.amount_usd for s in supplies)
    if total <= 0:
        return 0.0
    return sum(s.amount_usd * (s.supply_apr + s.reward_apr) for s in supplies) / total


def calculate_weighted_borrow_apr(borrows: Sequence[BorrowYield]) -> float:
    """sum(usd * (borrow_apr - reward_apr)) / sum(usd); 0 without debt."""
    total = sum(b.amount_usd for b in borrows)
    if total <= 0:
        return 0.0
    return sum(b.amount_usd * (b.borrow_apr - b.reward_apr) for b in borrows) / total


def calculate_total_reward_apr(
    supplies: Sequence[SupplyYield], borrows: Sequence[BorrowYield]
) -> float:
    total = sum(s.amount_usd for s in supplies) + sum(b.amount_usd for b in borrows)
    if total <= 0:
        return 0.0
    rewards = sum(s.amount_usd * s.reward_apr for s in supplies) + sum(
        b.amount_usd * b.reward_apr for b in borrows
    )
    return rewards / total


def calculate_net_apr(
    supplies: Sequence[SupplyYield], borrows: Sequence[BorrowYield]
) -> NetAPRResult:
    """Net APR across all positions.

    net_earnings = supply_earnings - borrow_costs + reward_earnings
    net_apr = net_earnings / (total_supply + total_borrow) * 100

    Note the weighted APRs already include rewards, so reward earnings are
    counted on top of them.
    """
    total_supply = sum(s.amount_usd for s in supplies)
    total_borrow = sum(b.amount_usd for b in borrows)

    supply_apr = calculate_weighted_supply_apr(supplies)
    borrow_apr = calculate_weighted_borrow_apr(borrows)

    supply_earnings = total_supply * supply_apr
    borrow_costs = total_borrow * borrow_apr
    reward_earnings = sum(s.amount_usd * s.reward_apr for s in supplies) + sum(
        b.amount_usd * b.reward_apr for b in borrows
    )
    net_earnings = supply_earnings - borrow_costs + reward_earnings

    total = total_supply + total_borrow
    return NetAPRResult(
        net_apr=net_earnings / total * 100 if total > 0 else 0.0,
        total_supply_apr=supply_apr,
        total_borrow_apr=borrow_apr,
        total_reward_apr=calculate_total_reward_apr(supplies, borrows),
        supply_earnings=supply_earnings,
        borrow_costs=borrow_costs,
        reward_earnings=reward_earnings,
        net_earnings=net_earnings,
    )


def convert_apr_to_apy(apr: float, periods: int = DAYS_PER_YEAR) -> float:
    """APY = (1 + apr / periods) ** periods - 1."""
    return apr_to_apy(apr, periods)


def calculate_projected_earnings(
    principal: float,
    apr: float,
    days_held: float,
    use_compounding: bool = True,
) -> float:
    """Interest earned on ``principal`` over ``days_held`` days.

    Compounding is daily; otherwise simple interest.
    """
    if use_compounding:
        return principal * (1.0 + apr / DAYS_PER_YEAR) ** days_held - principal
    return principal * apr * days_held / DAYS_PER_YEAR


def calculate_break_even_borrow_apr(
    supplies: Sequence[SupplyYield], total_borrow_usd: float
) -> float:
    """Borrow APR at which base supply earnings exactly cover borrow cost."""
    if total_borrow_usd <= 0:
        return 0.0
    supply_earnings = sum(s.amount_usd * s.supply_apr for s in supplies)
    return supply_earnings / total_borrow_usd


def calculate_optimal_leverage(
    supply_apr: float,
    borrow_apr: float,
    max_ltv: float,
    risk_tolerance: str = "moderate",
) -> float:
    """Suggested borrow-to-collateral ratio for a supply/borrow carry.

    Zero when borrowing costs at least as much as supplying earns.

    Raises:
        ValueError: If ``risk_tolerance`` is not conservative, moderate or aggressive.
    """
    if risk_tolerance not in _LEVERAGE_MULTIPLIERS:
        raise ValueError(f"Unknown risk tolerance: {risk_tolerance}")
    if supply_apr - borrow_apr <= 0:
        return 0.0
    return max_ltv * _LEVERAGE_MULTIPLIERS[risk_tolerance]
