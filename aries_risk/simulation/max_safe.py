"""Largest withdraw / borrow that keeps the health factor at a target.

Both solvers invert the health factor formula directly:

    withdraw:  HF_target = (W - x * LT_asset) / B        => x = (W - B * HF_target) / LT_asset
    borrow:    HF_target = W / (B + y / BF_asset)         => y = (W / HF_target - B) * BF_asset

where W is the weighted collateral and B the adjusted borrow. Feeding the
result back into the transaction simulator reproduces the target health
factor up to base-unit rounding.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

from aries_risk.data.constants import DEFAULT_BORROW_TARGET_HF, DEFAULT_WITHDRAW_TARGET_HF
from aries_risk.data.interfaces import BorrowPosition, DepositPosition
from aries_risk.position.risk import (
    calculate_adjusted_borrow,
    calculate_health_factor,
    calculate_weighted_collateral,
    total_borrow_value,
)
from aries_risk.simulation.results import MaxSafeAmount

logger = logging.getLogger(__name__)


def _check_target(target_health_factor: float) -> None:
    if target_health_factor <= 0:
        raise ValueError(
            f"target_health_factor must be positive, got {target_health_factor}"
        )


def _to_base_units(display_amount: float, decimals: int) -> int:
    return math.floor(display_amount * 10**decimals)


def _without_usd(
    deposits: Sequence[DepositPosition], index: int, amount_usd: float
) -> list[DepositPosition]:
    result = list(deposits)
    remaining = result[index].value_usd - amount_usd
    if remaining <= 0:
        del result[index]
    else:
        result[index] = replace(result[index], value_usd=remaining)
    return result


def _with_borrow_usd(
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    amount_usd: float,
    borrow_factor: float,
    decimals: int,
) -> list[BorrowPosition]:
    result = list(borrows)
    for i, b in enumerate(result):
        if b.coin_type == coin_type:
            result[i] = replace(b, value_usd=b.value_usd + amount_usd)
            return result
    result.append(
        BorrowPosition(
            coin_type=coin_type,
            value_usd=amount_usd,
            borrow_factor=borrow_factor,
            decimals=decimals,
        )
    )
    return result


def _zero(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    target_health_factor: float,
) -> MaxSafeAmount:
    return MaxSafeAmount(
        max_amount=0,
        max_amount_display=0.0,
        max_amount_usd=0.0,
        resulting_health_factor=calculate_health_factor(deposits, borrows),
        target_health_factor=target_health_factor,
    )


def calculate_max_safe_withdrawal(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    target_health_factor: float = DEFAULT_WITHDRAW_TARGET_HF,
) -> MaxSafeAmount | None:
    """Maximum amount of ``coin_type`` that can be withdrawn at the target HF.

    A deposit without a known underlying amount has no implied price, so no
    token amount can be derived and the result is zero.

    Returns:
        MaxSafeAmount, or None if ``coin_type`` is not deposited.

    Raises:
        ValueError: If ``target_health_factor`` is not positive.
    """
    _check_target(target_health_factor)

    index = next((i for i, d in enumerate(deposits) if d.coin_type == coin_type), None)
    if index is None:
        logger.debug("Max withdrawal requested for %s which is not deposited", coin_type)
        return None
    deposit = deposits[index]

    if deposit.price_usd <= 0:
        logger.warning(
            "No underlying amount for %s; cannot size a withdrawal", coin_type
        )
        return _zero(deposits, borrows, target_health_factor)

    # Without debt everything is withdrawable.
    if total_borrow_value(borrows) <= 0:
        return MaxSafeAmount(
            max_amount=deposit.underlying_amount,
            max_amount_display=deposit.amount,
            max_amount_usd=deposit.value_usd,
            resulting_health_factor=float("inf"),
            target_health_factor=target_health_factor,
        )

    required_collateral = calculate_adjusted_borrow(borrows) * target_health_factor
    headroom = calculate_weighted_collateral(deposits) - required_collateral

    if deposit.liquidation_threshold > 0:
        max_usd = headroom / deposit.liquidation_threshold
    else:
        # The deposit does not back any debt; removing it leaves HF unchanged.
        max_usd = deposit.value_usd
    max_usd = max(0.0, min(max_usd, deposit.value_usd))

    if max_usd <= 0:
        return _zero(deposits, borrows, target_health_factor)

    if max_usd >= deposit.value_usd:
        max_amount = deposit.underlying_amount
        display = deposit.amount
    else:
        display = max_usd / deposit.price_usd
        max_amount = _to_base_units(display, deposit.decimals)

    return MaxSafeAmount(
        max_amount=max_amount,
        max_amount_display=display,
        max_amount_usd=max_usd,
        resulting_health_factor=calculate_health_factor(
            _without_usd(deposits, index, max_usd), borrows
        ),
        target_health_factor=target_health_factor,
    )


def calculate_max_safe_borrow(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    price_usd: float,
    borrow_factor: float,
    decimals: int,
    target_health_factor: float = DEFAULT_BORROW_TARGET_HF,
) -> MaxSafeAmount:
    """Maximum amount of ``coin_type`` that can be borrowed at the target HF.

    Raises:
        ValueError: If ``target_health_factor`` is not positive.
    """
    _check_target(target_health_factor)

    max_adjusted_borrow = calculate_weighted_collateral(deposits) / target_health_factor
    spare_adjusted_borrow = max(
        0.0, max_adjusted_borrow - calculate_adjusted_borrow(borrows)
    )
    max_usd = spare_adjusted_borrow * borrow_factor

    if price_usd <= 0:
        logger.warning("No usable price for %s (%s); max borrow is 0", coin_type, price_usd)
        max_usd = 0.0
    if not 0.0 < borrow_factor <= 1.0:
        logger.warning(
            "Invalid borrow_factor %s for %s; max borrow is 0", borrow_factor, coin_type
        )
        max_usd = 0.0

    if max_usd <= 0:
        return _zero(deposits, borrows, target_health_factor)

    display = max_usd / price_usd
    projected = _with_borrow_usd(borrows, coin_type, max_usd, borrow_factor, decimals)
    return MaxSafeAmount(
        max_amount=_to_base_units(display, decimals),
        max_amount_display=display,
        max_amount_usd=max_usd,
        resulting_health_factor=calculate_health_factor(deposits, projected),
        target_health_factor=target_health_factor,
    )
