"""Normalized position, reserve and transaction types plus the params provider interface.

Every ratio is a decimal fraction in [0, 1] (0.75 = 75%). Raw chain values in
basis points must be divided by ``constants.BPS`` before they reach these
types; the engine never guesses a scale.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from aries_risk.data.constants import DEFAULT_DECIMALS
from aries_risk.protocol.emode import EModeCategory


def _check_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be a fraction in [0, 1], got {value}")


def _display_amount(base_units: int, decimals: int) -> float:
    return base_units / (10**decimals)


@dataclass(frozen=True)
class DepositPosition:
    """A supplied asset, valued in USD with its own risk parameters."""

    coin_type: str
    value_usd: float
    loan_to_value: float
    liquidation_threshold: float
    underlying_amount: int = 0  # base units
    decimals: int = DEFAULT_DECIMALS
    is_collateral: bool = True
    current_apr: float = 0.0
    symbol: str = ""

    def __post_init__(self) -> None:
        _check_fraction("loan_to_value", self.loan_to_value)
        _check_fraction("liquidation_threshold", self.liquidation_threshold)
        if self.liquidation_threshold < self.loan_to_value:
            raise ValueError(
                f"liquidation_threshold ({self.liquidation_threshold}) must be >= "
                f"loan_to_value ({self.loan_to_value}) for {self.coin_type}"
            )

    @property
    def amount(self) -> float:
        """Deposit size in display (whole-token) units."""
        return _display_amount(self.underlying_amount, self.decimals)

    @property
    def price_usd(self) -> float:
        """Implied USD price per whole token (0 when the amount is unknown)."""
        if self.amount <= 0:
            return 0.0
        return self.value_usd / self.amount


@dataclass(frozen=True)
class BorrowPosition:
    """A borrowed asset, valued in USD.

    ``borrow_factor`` inflates the debt's weight in the health factor:
    a factor of 0.9 counts $90 of debt as $100.
    """

    coin_type: str
    value_usd: float
    borrow_factor: float = 1.0
    borrowed_amount: int = 0  # base units
    decimals: int = DEFAULT_DECIMALS
    current_apr: float = 0.0
    symbol: str = ""

    def __post_init__(self) -> None:
        if not 0.0 < self.borrow_factor <= 1.0:
            raise ValueError(
                f"borrow_factor must be in (0, 1], got {self.borrow_factor} "
                f"for {self.coin_type}"
            )

    @property
    def amount(self) -> float:
        """Debt size in display (whole-token) units."""
        return _display_amount(self.borrowed_amount, self.decimals)

    @property
    def price_usd(self) -> float:
        if self.amount <= 0:
            return 0.0
        return self.value_usd / self.amount


@dataclass(frozen=True)
class InterestRateConfig:
    """Kinked rate curve parameters (annual rates as decimals)."""

    min_borrow_rate: float
    optimal_borrow_rate: float
    max_borrow_rate: float
    optimal_utilization: float

    def __post_init__(self) -> None:
        if not self.min_borrow_rate <= self.optimal_borrow_rate <= self.max_borrow_rate:
            raise ValueError(
                "expected min_borrow_rate <= optimal_borrow_rate <= max_borrow_rate, got "
                f"{self.min_borrow_rate}, {self.optimal_borrow_rate}, {self.max_borrow_rate}"
            )
        if not 0.0 < self.optimal_utilization < 1.0:
            raise ValueError(
                f"optimal_utilization must be in (0, 1), got {self.optimal_utilization}"
            )


@dataclass(frozen=True)
class Reserve:
    """Per-asset reserve snapshot."""

    coin_type: str
    utilization: float
    interest_rate_config: InterestRateConfig
    reserve_factor: float
    price_usd: float

    def __post_init__(self) -> None:
        _check_fraction("reserve_factor", self.reserve_factor)


@dataclass(frozen=True)
class ReserveState:
    """Current totals of a reserve pool (in asset units)."""

    total_borrowed: float
    total_cash: float  # Liquidity available to borrow or withdraw


@dataclass(frozen=True)
class AssetParams:
    """Normal (non E-mode) risk parameters for an asset."""

    symbol: str
    decimals: int
    loan_to_value: float
    liquidation_threshold: float
    borrow_factor: float
    liquidation_bonus: float


# --- Transaction parameters (amounts in base units) ---


@dataclass(frozen=True)
class SupplyParams:
    coin_type: str
    amount: int
    use_as_collateral: bool = True


@dataclass(frozen=True)
class WithdrawParams:
    coin_type: str
    amount: int
    withdraw_all: bool = False


@dataclass(frozen=True)
class BorrowParams:
    coin_type: str
    amount: int


@dataclass(frozen=True)
class RepayParams:
    coin_type: str
    amount: int
    repay_all: bool = False


class RiskParamsProvider(ABC):
    """Abstract source of per-asset risk parameters and E-mode categories."""

    @abstractmethod
    def get_asset_params(self, coin_type: str) -> AssetParams | None:
        """Get normal risk parameters for an asset, or None if unknown."""

    @abstractmethod
    def get_emode_category(self, category_id: int) -> EModeCategory | None:
        """Get an E-mode category by id, or None if it does not exist."""

    @abstractmethod
    def list_emode_categories(self) -> list[EModeCategory]:
        """All E-mode categories, ordered by id."""
