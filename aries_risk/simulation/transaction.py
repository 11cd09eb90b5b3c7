"""Health factor impact of a supply, withdraw, borrow or repay before it is submitted.

Each simulation compares the caller's positions with a modified copy. Input
sequences and positions are never mutated: positions are frozen and changes
are applied with ``dataclasses.replace`` on a new list.

Simulations annotate risk; they never reject a transaction.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

from aries_risk.data.constants import DEFAULT_DECIMALS
from aries_risk.data.interfaces import (
    BorrowParams,
    BorrowPosition,
    DepositPosition,
    RepayParams,
    RiskParamsProvider,
    SupplyParams,
    WithdrawParams,
)
from aries_risk.position.risk import (
    DEFAULT_THRESHOLDS,
    RiskThresholds,
    calculate_health_factor,
    health_factor_status,
    total_borrow_value,
    total_deposit_value,
)
from aries_risk.simulation.results import HealthFactorSimulation, TransactionType

logger = logging.getLogger(__name__)

LIQUIDATABLE_WARNING = "This {action} would make position liquidatable"
DANGER_ZONE_WARNING = "Warning: health factor would be in the danger zone"

_PARAMS_TYPES = {
    TransactionType.SUPPLY: SupplyParams,
    TransactionType.WITHDRAW: WithdrawParams,
    TransactionType.BORROW: BorrowParams,
    TransactionType.REPAY: RepayParams,
}


def base_units_to_usd(amount: int, decimals: int, price_usd: float) -> float:
    return amount / (10**decimals) * price_usd


def _clamp_fraction(name: str, coin_type: str, value: float | None) -> float:
    if value is None:
        logger.warning("No %s for %s; treating it as 0", name, coin_type)
        return 0.0
    clamped = max(0.0, min(1.0, value))
    if clamped != value:
        logger.warning(
            "%s %s for %s out of range; clamped to %s", name, value, coin_type, clamped
        )
    return clamped


def _find(positions: Sequence, coin_type: str) -> int | None:
    for i, p in enumerate(positions):
        if p.coin_type == coin_type:
            return i
    return None


# --- Position deltas ---


def apply_supply(
    deposits: Sequence[DepositPosition],
    params: SupplyParams,
    price_usd: float,
    loan_to_value: float | None = None,
    liquidation_threshold: float | None = None,
    decimals: int = DEFAULT_DECIMALS,
) -> list[DepositPosition]:
    """Return a copy of ``deposits`` with the supply added.

    An existing deposit keeps its own decimals and risk parameters. A new
    deposit is created from the supplied parameters; missing or out-of-range
    ratios are clamped rather than rejected. A new deposit not used as
    collateral gets an LTV and liquidation threshold of 0, so it adds value
    without backing any debt.
    """
    result = list(deposits)
    idx = _find(result, params.coin_type)

    if idx is not None:
        held = result[idx]
        result[idx] = replace(
            held,
            value_usd=held.value_usd
            + base_units_to_usd(params.amount, held.decimals, price_usd),
            underlying_amount=held.underlying_amount + params.amount,
        )
        return result

    if not params.use_as_collateral:
        ltv = threshold = 0.0
    else:
        ltv = _clamp_fraction("loan_to_value", params.coin_type, loan_to_value)
        threshold = _clamp_fraction(
            "liquidation_threshold", params.coin_type, liquidation_threshold
        )
    if threshold < ltv:
        logger.warning(
            "liquidation_threshold %s below loan_to_value %s for %s; using the LTV",
            threshold,
            ltv,
            params.coin_type,
        )
        threshold = ltv

    result.append(
        DepositPosition(
            coin_type=params.coin_type,
            value_usd=base_units_to_usd(params.amount, decimals, price_usd),
            loan_to_value=ltv,
            liquidation_threshold=threshold,
            underlying_amount=params.amount,
            decimals=decimals,
            is_collateral=params.use_as_collateral,
        )
    )
    return result


def apply_withdraw(
    deposits: Sequence[DepositPosition],
    params: WithdrawParams,
    price_usd: float,
) -> list[DepositPosition]:
    """Return a copy of ``deposits`` with the withdrawal subtracted.

    Deposits that reach zero value are dropped.
    """
    result = list(deposits)
    idx = _find(result, params.coin_type)
    if idx is None:
        logger.debug("Withdraw of %s which is not deposited; no change", params.coin_type)
        return result

    held = result[idx]
    if params.withdraw_all:
        del result[idx]
        return result

    value = held.value_usd - base_units_to_usd(params.amount, held.decimals, price_usd)
    if value <= 0:
        del result[idx]
        return result
    result[idx] = replace(
        held,
        value_usd=value,
        underlying_amount=max(0, held.underlying_amount - params.amount),
    )
    return result


def apply_borrow(
    borrows: Sequence[BorrowPosition],
    params: BorrowParams,
    price_usd: float,
    borrow_factor: float | None = None,
    decimals: int = DEFAULT_DECIMALS,
) -> list[BorrowPosition]:
    """Return a copy of ``borrows`` with the new debt added."""
    result = list(borrows)
    idx = _find(result, params.coin_type)

    if idx is not None:
        held = result[idx]
        result[idx] = replace(
            held,
            value_usd=held.value_usd
            + base_units_to_usd(params.amount, held.decimals, price_usd),
            borrowed_amount=held.borrowed_amount + params.amount,
        )
        return result

    if borrow_factor is None or not 0.0 < borrow_factor <= 1.0:
        logger.warning(
            "Invalid borrow_factor %s for %s; using 1.0", borrow_factor, params.coin_type
        )
        borrow_factor = 1.0

    result.append(
        BorrowPosition(
            coin_type=params.coin_type,
            value_usd=base_units_to_usd(params.amount, decimals, price_usd),
            borrow_factor=borrow_factor,
            borrowed_amount=params.amount,
            decimals=decimals,
        )
    )
    return result


def apply_repay(
    borrows: Sequence[BorrowPosition],
    params: RepayParams,
    price_usd: float,
) -> list[BorrowPosition]:
    """Return a copy of ``borrows`` with the repayment subtracted.

    Borrows that reach zero value are dropped.
    """
    result = list(borrows)
    idx = _find(result, params.coin_type)
    if idx is None:
        logger.debug("Repay of %s which is not borrowed; no change", params.coin_type)
        return result

    held = result[idx]
    if params.repay_all:
        del result[idx]
        return result

    value = held.value_usd - base_units_to_usd(params.amount, held.decimals, price_usd)
    if value <= 0:
        del result[idx]
        return result
    result[idx] = replace(
        held,
        value_usd=value,
        borrowed_amount=max(0, held.borrowed_amount - params.amount),
    )
    return result


# --- Simulations ---


def _health_factor_change(current: float, projected: float) -> tuple[float, float]:
    if math.isinf(current) and math.isinf(projected):
        return 0.0, 0.0
    change = projected - current
    if math.isinf(current) or current == 0:
        return change, 0.0
    return change, change / current * 100


def _build_simulation(
    action: TransactionType,
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    projected_deposits: Sequence[DepositPosition],
    projected_borrows: Sequence[BorrowPosition],
    thresholds: RiskThresholds,
) -> HealthFactorSimulation:
    current_hf = calculate_health_factor(deposits, borrows)
    projected_hf = calculate_health_factor(projected_deposits, projected_borrows)
    change, change_percent = _health_factor_change(current_hf, projected_hf)

    warning = None
    if action is TransactionType.REPAY:
        # Repaying can only lower the HF denominator.
        is_safe = True
    else:
        is_safe = projected_hf >= thresholds.liquidation
        if action in (TransactionType.WITHDRAW, TransactionType.BORROW):
            if not is_safe:
                warning = LIQUIDATABLE_WARNING.format(action=action.value)
            elif projected_hf < thresholds.danger:
                warning = DANGER_ZONE_WARNING

    return HealthFactorSimulation(
        action=action,
        current_health_factor=current_hf,
        projected_health_factor=projected_hf,
        change=change,
        change_percent=change_percent,
        current_status=health_factor_status(current_hf, thresholds),
        projected_status=health_factor_status(projected_hf, thresholds),
        total_collateral_usd=total_deposit_value(projected_deposits),
        total_borrow_usd=total_borrow_value(projected_borrows),
        is_safe=is_safe,
        warning=warning,
    )


def simulate_supply(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    params: SupplyParams,
    price_usd: float,
    loan_to_value: float | None = None,
    liquidation_threshold: float | None = None,
    decimals: int = DEFAULT_DECIMALS,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> HealthFactorSimulation:
    projected = apply_supply(
        deposits, params, price_usd, loan_to_value, liquidation_threshold, decimals
    )
    return _build_simulation(
        TransactionType.SUPPLY, deposits, borrows, projected, borrows, thresholds
    )


def simulate_withdraw(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    params: WithdrawParams,
    price_usd: float,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> HealthFactorSimulation:
    projected = apply_withdraw(deposits, params, price_usd)
    return _build_simulation(
        TransactionType.WITHDRAW, deposits, borrows, projected, borrows, thresholds
    )


def simulate_borrow(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    params: BorrowParams,
    price_usd: float,
    borrow_factor: float | None = None,
    decimals: int = DEFAULT_DECIMALS,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> HealthFactorSimulation:
    projected = apply_borrow(borrows, params, price_usd, borrow_factor, decimals)
    return _build_simulation(
        TransactionType.BORROW, deposits, borrows, deposits, projected, thresholds
    )


def simulate_repay(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    params: RepayParams,
    price_usd: float,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> HealthFactorSimulation:
    projected = apply_repay(borrows, params, price_usd)
    return _build_simulation(
        TransactionType.REPAY, deposits, borrows, deposits, projected, thresholds
    )


def simulate_transaction(
    action: TransactionType | str,
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    params: SupplyParams | WithdrawParams | BorrowParams | RepayParams,
    price_usd: float,
    provider: RiskParamsProvider | None = None,
    loan_to_value: float | None = None,
    liquidation_threshold: float | None = None,
    borrow_factor: float | None = None,
    decimals: int | None = None,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> HealthFactorSimulation:
    """Dispatch to the simulation for ``action``.

    Risk parameters for an asset not yet held are taken from the explicit
    arguments first, then from ``provider``, and otherwise default as in
    ``apply_supply`` / ``apply_borrow``.

    Raises:
        ValueError: If ``action`` is not a known transaction type, or
            ``params`` is not the params type for ``action``.
    """
    action = TransactionType(action)
    expected = _PARAMS_TYPES[action]
    if not isinstance(params, expected):
        raise ValueError(
            f"{action.value} expects {expected.__name__}, got {type(params).__name__}"
        )

    asset = provider.get_asset_params(params.coin_type) if provider is not None else None
    if asset is not None:
        loan_to_value = asset.loan_to_value if loan_to_value is None else loan_to_value
        liquidation_threshold = (
            asset.liquidation_threshold
            if liquidation_threshold is None
            else liquidation_threshold
        )
        borrow_factor = asset.borrow_factor if borrow_factor is None else borrow_factor
        decimals = asset.decimals if decimals is None else decimals
    if decimals is None:
        decimals = DEFAULT_DECIMALS

    if action is TransactionType.SUPPLY:
        return simulate_supply(
            deposits, borrows, params, price_usd,
            loan_to_value, liquidation_threshold, decimals, thresholds,
        )
    if action is TransactionType.WITHDRAW:
        return simulate_withdraw(deposits, borrows, params, price_usd, thresholds)
    if action is TransactionType.BORROW:
        return simulate_borrow(
            deposits, borrows, params, price_usd, borrow_factor, decimals, thresholds
        )
    return simulate_repay(deposits, borrows, params, price_usd, thresholds)
