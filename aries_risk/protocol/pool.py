"""Reserve pool state and rate-impact simulation."""

from dataclasses import dataclass

from aries_risk.data.interfaces import ReserveState
from aries_risk.protocol.interest_rate import InterestRateModel, calculate_utilization


@dataclass(frozen=True)
class PoolState:
    """Pool totals in asset units."""

    total_borrowed: float
    total_cash: float

    @property
    def total_supply(self) -> float:
        return self.total_cash + self.total_borrowed

    @property
    def utilization(self) -> float:
        return calculate_utilization(self.total_borrowed, self.total_cash)

    @classmethod
    def from_reserve_state(cls, state: ReserveState) -> "PoolState":
        return cls(total_borrowed=state.total_borrowed, total_cash=state.total_cash)


@dataclass(frozen=True)
class PoolImpact:
    """Before/after utilization and rates for a hypothetical pool change."""

    utilization_before: float
    utilization_after: float
    borrow_rate_before: float
    borrow_rate_after: float
    supply_rate_before: float
    supply_rate_after: float


class PoolModel:
    """Pool simulation combining state with rate model.

    None of the simulate_* methods mutate the pool state.
    """

    def __init__(self, state: PoolState, rate_model: InterestRateModel) -> None:
        self.state = state
        self.rate_model = rate_model

    @property
    def utilization(self) -> float:
        return self.state.utilization

    @property
    def borrow_rate(self) -> float:
        return self.rate_model.borrow_rate(self.utilization)

    @property
    def supply_rate(self) -> float:
        return self.rate_model.supply_rate(self.utilization)

    def _impact(self, after: PoolState) -> PoolImpact:
        u_after = after.utilization
        return PoolImpact(
            utilization_before=self.utilization,
            utilization_after=u_after,
            borrow_rate_before=self.borrow_rate,
            borrow_rate_after=self.rate_model.borrow_rate(u_after),
            supply_rate_before=self.supply_rate,
            supply_rate_after=self.rate_model.supply_rate(u_after),
        )

    def simulate_borrow(self, amount: float) -> PoolImpact:
        """A borrow moves liquidity from cash to debt.

        Borrowing more than the available cash is capped at the cash.
        """
        moved = min(max(0.0, amount), self.state.total_cash)
        return self._impact(
            PoolState(
                total_borrowed=self.state.total_borrowed + moved,
                total_cash=self.state.total_cash - moved,
            )
        )

    def simulate_repay(self, amount: float) -> PoolImpact:
        """A repayment moves liquidity from debt back to cash."""
        moved = min(max(0.0, amount), self.state.total_borrowed)
        return self._impact(
            PoolState(
                total_borrowed=self.state.total_borrowed - moved,
                total_cash=self.state.total_cash + moved,
            )
        )

    def simulate_supply(self, amount: float) -> PoolImpact:
        """A deposit adds cash; debt is unchanged so utilization drops."""
        return self._impact(
            PoolState(
                total_borrowed=self.state.total_borrowed,
                total_cash=self.state.total_cash + max(0.0, amount),
            )
        )

    def simulate_withdrawal(self, amount: float) -> PoolImpact:
        """A withdrawal removes cash. Only idle cash can leave the pool."""
        return self._impact(
            PoolState(
                total_borrowed=self.state.total_borrowed,
                total_cash=max(0.0, self.state.total_cash - max(0.0, amount)),
            )
        )
