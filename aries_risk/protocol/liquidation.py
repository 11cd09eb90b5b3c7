"""Liquidation distance: liquidation price, price drop and HF sensitivity."""

import logging
from collections.abc import Sequence
from dataclasses import replace

import numpy as np
import pandas as pd

from aries_risk.data.constants import LIQUIDATION_HEALTH_FACTOR
from aries_risk.data.interfaces import BorrowPosition, DepositPosition
from aries_risk.position.risk import (
    calculate_adjusted_borrow,
    calculate_health_factor,
    calculate_weighted_collateral,
)

logger = logging.getLogger(__name__)


def _reprice(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    ratio: float,
) -> tuple[list[DepositPosition], list[BorrowPosition]]:
    """Scale every position in ``coin_type`` by a price ratio."""
    return (
        [
            replace(d, value_usd=d.value_usd * ratio) if d.coin_type == coin_type else d
            for d in deposits
        ],
        [
            replace(b, value_usd=b.value_usd * ratio) if b.coin_type == coin_type else b
            for b in borrows
        ],
    )


def liquidation_price(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    price_usd: float | None = None,
) -> float:
    """Price of ``coin_type`` at which HF reaches 1.0, other prices fixed.

    A price move changes both deposits and borrows of ``coin_type``. Solving
    HF(ratio) = 1 for the price ratio:

        ratio = (B_other - W_other) / (v * LT - b / BF)

    Args:
        price_usd: Current price. Defaults to the price implied by the
            held deposit.

    Returns:
        Liquidation price in USD, or 0 if no price decline liquidates the
        position.
    """
    held = [d for d in deposits if d.coin_type == coin_type]
    if not held or not borrows:
        return 0.0

    if price_usd is None:
        price_usd = held[0].price_usd
    if price_usd <= 0:
        logger.warning("No usable price for %s; cannot compute liquidation price", coin_type)
        return 0.0

    weighted = calculate_weighted_collateral(held)
    adjusted = calculate_adjusted_borrow([b for b in borrows if b.coin_type == coin_type])
    sensitivity = weighted - adjusted * LIQUIDATION_HEALTH_FACTOR
    if sensitivity <= 0:
        return 0.0

    other_weighted = calculate_weighted_collateral(
        [d for d in deposits if d.coin_type != coin_type]
    )
    other_adjusted = calculate_adjusted_borrow(
        [b for b in borrows if b.coin_type != coin_type]
    )
    ratio = (other_adjusted * LIQUIDATION_HEALTH_FACTOR - other_weighted) / sensitivity
    return max(0.0, ratio * price_usd)


def liquidation_price_drop(
    deposits: Sequence[DepositPosition], borrows: Sequence[BorrowPosition]
) -> float:
    """Uniform fractional collateral drop that takes HF to 1.0.

    0.25 means every deposit losing a quarter of its value triggers
    liquidation. Returns inf without debt and 0 if already liquidatable.
    """
    adjusted = calculate_adjusted_borrow(borrows)
    if adjusted <= 0:
        return float("inf")
    weighted = calculate_weighted_collateral(deposits)
    if weighted <= 0:
        return 0.0
    critical_ratio = adjusted * LIQUIDATION_HEALTH_FACTOR / weighted
    if critical_ratio >= 1.0:
        return 0.0
    return 1.0 - critical_ratio


def price_sensitivity(
    deposits: Sequence[DepositPosition],
    borrows: Sequence[BorrowPosition],
    coin_type: str,
    shock_range: tuple[float, float] = (-0.5, 0.5),
    n_points: int = 101,
) -> pd.DataFrame:
    """Health factor across a range of price shocks to ``coin_type``.

    Returns:
        DataFrame with columns: price_change, health_factor
    """
    shocks = np.linspace(shock_range[0], shock_range[1], n_points)
    hfs = []
    for shock in shocks:
        shocked_deposits, shocked_borrows = _reprice(
            deposits, borrows, coin_type, max(0.0, 1.0 + float(shock))
        )
        hfs.append(calculate_health_factor(shocked_deposits, shocked_borrows))

    return pd.DataFrame({"price_change": shocks, "health_factor": hfs})
