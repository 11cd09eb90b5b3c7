"""E-mode eligibility, benefit and risk evaluation.

A user may hold at most one active E-mode category. Entering it replaces the
LTV and liquidation threshold of every eligible deposit with the category's
enhanced values; exiting reverts to each asset's normal parameters.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from aries_risk.data.constants import (
    DEFAULT_EMODE_MIN_SAFE_HF,
    EMODE_HIGHLY_RECOMMENDED_PCT,
    EMODE_PENALTY_BAND,
    EMODE_RECOMMENDED_PCT,
)
from aries_risk.data.interfaces import BorrowPosition, DepositPosition, RiskParamsProvider
from aries_risk.data.static_params import StaticDataProvider
from aries_risk.position.risk import (
    DEFAULT_THRESHOLDS,
    RiskMetrics,
    RiskThresholds,
    calculate_borrowing_power,
    calculate_health_factor,
    calculate_portfolio_risk,
)
from aries_risk.protocol.emode import EModeCategory

logger = logging.getLogger(__name__)

_DEFAULT_PROVIDER = StaticDataProvider()

INVALID_CATEGORY_REASON = "Invalid E-Mode category"


class RiskLevel(str, Enum):
    LOWER = "lower"
    SAME = "same"
    HIGHER = "higher"


@dataclass(frozen=True)
class EModeEligibility:
    can_enter: bool
    reason: str | None = None
    ineligible_assets: tuple[str, ...] = ()


@dataclass(frozen=True)
class EModeComparison:
    normal_borrowing_power: float
    emode_borrowing_power: float
    improvement: float
    improvement_percentage: float


@dataclass(frozen=True)
class EModeBenefit:
    """Benefit of entering an E-mode category.

    ``ltv_increase`` and ``threshold_increase`` are measured against the
    simple average of the deposits' normal parameters, as fractions.
    """

    category_name: str
    ltv_increase: float
    threshold_increase: float
    normal_borrowing_power: float
    emode_borrowing_power: float
    additional_borrowing_power: float
    improvement_percentage: float
    risk_level: RiskLevel
    recommendation: str


@dataclass(frozen=True)
class EModeTransition:
    is_valid: bool
    current_health_factor: float
    target_health_factor: float
    warning: str | None = None


def _provider(provider: RiskParamsProvider | None) -> RiskParamsProvider:
    return _DEFAULT_PROVIDER if provider is None else provider


# --- Category lookups ---


def get_category_by_id(
    category_id: int, provider: RiskParamsProvider | None = None
) -> EModeCategory | None:
    return _provider(provider).get_emode_category(category_id)


def get_category_for_asset(
    coin_type: str, provider: RiskParamsProvider | None = None
) -> EModeCategory | None:
    """First category (by id) that lists ``coin_type``."""
    for category in _provider(provider).list_emode_categories():
        if category.is_eligible(coin_type):
            return category
    return None


def is_emode_eligible(coin_type: str, provider: RiskParamsProvider | None = None) -> bool:
    return get_category_for_asset(coin_type, provider) is not None


def can_enter_emode(
    deposit_coin_types: Iterable[str],
    category_id: int,
    provider: RiskParamsProvider | None = None,
) -> EModeEligibility:
    """Check whether every held deposit belongs to the category.

    A single ineligible deposit blocks entry; there is no partial entry.
    """
    category = get_category_by_id(category_id, provider)
    if category is None:
        logger.warning("Unknown E-mode category %s", category_id)
        return EModeEligibility(can_enter=False, reason=INVALID_CATEGORY_REASON)

    ineligible = tuple(c for c in deposit_coin_types if not category.is_eligible(c))
    if ineligible:
        return EModeEligibility(
            can_enter=False,
            reason=f"Some assets are not eligible for {category.name} E-Mode",
            ineligible_assets=ineligible,
        )
    return EModeEligibility(can_enter=True)


def get_available_categories(
    deposit_coin_types: Iterable[str], provider: RiskParamsProvider | None = None
) -> list[EModeCategory]:
    coin_types = list(deposit_coin_types)
    return [
        category
        for category in _provider(provider).list_emode_categories()
        if can_enter_emode(coin_types, category.category_id, provider).can_enter
    ]


def can_borrow_in_emode(coin_type: str, category: EModeCategory) -> bool:
    """In E-mode only assets of the same category can be borrowed."""
    return category.is_eligible(coin_type)


def get_borrowable_assets_in_emode(
    category: EModeCategory, all_assets: Iterable[str]
) -> list[str]:
    return [asset for asset in all_assets if category.is_eligible(asset)]


# --- Borrowing power ---


def calculate_emode_borrowing_power(
    deposits: Sequence[DepositPosition], category: EModeCategory
) -> float:
    """Borrowing power at the category LTV; ineligible deposits count zero."""
    return sum(
        d.value_usd * category.max_ltv for d in deposits if category.is_eligible(d.coin_type)
    )


def calculate_emode_liquidation_value(
    deposits: Sequence[DepositPosition], category: EModeCategory
) -> float:
    return sum(
        d.value_usd * category.liquidation_threshold
        for d in deposits
        if category.is_eligible(d.coin_type)
    )


def compare_normal_vs_emode(
    deposits: Sequence[DepositPosition], category: EModeCategory
) -> EModeComparison:
    normal = calculate_borrowing_power(deposits)
    emode = calculate_emode_borrowing_power(deposits, category)
    improvement = emode - normal
    return EModeComparison(
        normal_borrowing_power=normal,
        emode_borrowing_power=emode,
        improvement=improvement,
        improvement_percentage=improvement / normal * 100 if normal > 0 else 0.0,
    )


def emode_risk_level(category: EModeCategory) -> RiskLevel:
    """Heuristic: a liquidation penalty under 5% reads as lower risk."""
    if category.liquidation_penalty < EMODE_PENALTY_BAND:
        return RiskLevel.LOWER
    if category.liquidation_penalty > EMODE_PENALTY_BAND:
        return RiskLevel.HIGHER
    return RiskLevel.SAME


def emode_recommendation(improvement_percentage: float) -> str:
    if improvement_percentage > EMODE_HIGHLY_RECOMMENDED_PCT:
        return "Highly recommended - significant borrowing power increase"
    if improvement_percentage > EMODE_RECOMMENDED_PCT:
        return "Recommended - moderate borrowing power increase"
    return "Optional - minor benefit"


def calculate_emode_benefit(
    deposits: Sequence[DepositPosition], category: EModeCategory
) -> EModeBenefit:
    comparison = compare_normal_vs_emode(deposits, category)

    n = len(deposits)
    avg_ltv = sum(d.loan_to_value for d in deposits) / n if n else 0.0
    avg_threshold = sum(d.liquidation_threshold for d in deposits) / n if n else 0.0

    return EModeBenefit(
        category_name=category.name,
        ltv_increase=category.max_ltv - avg_ltv,
        threshold_increase=category.liquidation_threshold - avg_threshold,
        normal_borrowing_power=comparison.normal_borrowing_power,
        emode_borrowing_power=comparison.emode_borrowing_power,
        additional_borrowing_power=comparison.improvement,
        improvement_percentage=comparison.improvement_percentage,
        risk_level=emode_risk_level(category),
        recommendation=emode_recommendation(comparison.improvement_percentage),
    )


# --- Active category ---


def apply_emode(
    deposits: Sequence[DepositPosition], category: EModeCategory | None
) -> list[DepositPosition]:
    """Deposits as seen by the protocol with ``category`` active.

    ``None`` means no category: every deposit keeps its normal parameters.
    """
    if category is None:
        return list(deposits)
    return [
        replace(
            d,
            loan_to_value=category.max_ltv,
            liquidation_threshold=category.liquidation_threshold,
        )
        if category.is_eligible(d.coin_type)
        else d
        for d in deposits
    ]


def calculate_emode_risk(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    category: EModeCategory | None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskMetrics:
    return calculate_portfolio_risk(apply_emode(deposits, category), borrows, thresholds)


def validate_emode_transition(
    current_health_factor: float,
    target_health_factor: float,
    min_safe_health_factor: float = DEFAULT_EMODE_MIN_SAFE_HF,
) -> EModeTransition:
    """Check whether switching to/from E-mode keeps the position safe."""
    if target_health_factor < min_safe_health_factor:
        return EModeTransition(
            is_valid=False,
            current_health_factor=current_health_factor,
            target_health_factor=target_health_factor,
            warning=(
                f"Health factor would drop to {target_health_factor:.2f}. "
                f"Minimum safe level is {min_safe_health_factor}"
            ),
        )
    if target_health_factor < current_health_factor * 0.8:
        return EModeTransition(
            is_valid=True,
            current_health_factor=current_health_factor,
            target_health_factor=target_health_factor,
            warning="Health factor will decrease significantly. Proceed with caution.",
        )
    return EModeTransition(
        is_valid=True,
        current_health_factor=current_health_factor,
        target_health_factor=target_health_factor,
    )


def simulate_emode_switch(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    target_category: EModeCategory | None,
    current_category: EModeCategory | None = None,
    min_safe_health_factor: float = DEFAULT_EMODE_MIN_SAFE_HF,
) -> EModeTransition:
    """Validate moving from ``current_category`` to ``target_category``.

    Either may be None (no E-mode). ``deposits`` carry normal parameters.
    Entering a category also requires every deposit to be eligible.
    """
    current_hf = calculate_health_factor(apply_emode(deposits, current_category), borrows)

    if target_category is not None and not all(
        target_category.is_eligible(d.coin_type) for d in deposits
    ):
        return EModeTransition(
            is_valid=False,
            current_health_factor=current_hf,
            target_health_factor=current_hf,
            warning=f"Some assets are not eligible for {target_category.name} E-Mode",
        )

    target_hf = calculate_health_factor(apply_emode(deposits, target_category), borrows)
    return validate_emode_transition(current_hf, target_hf, min_safe_health_factor)


def format_emode_category(category: EModeCategory) -> str:
    return f"{category.name} ({category.max_ltv * 100:.0f}% LTV)"
