"""Tests for liquidation price and price sensitivity."""

import math

import pytest

from aries_risk.data.constants import APT, USDC
from aries_risk.data.interfaces import BorrowPosition, DepositPosition
from aries_risk.protocol.liquidation import (
    liquidation_price,
    liquidation_price_drop,
    price_sensitivity,
)


@pytest.fixture
def apt_deposit() -> DepositPosition:
    # 100 APT at $10
    return DepositPosition(
        coin_type=APT,
        value_usd=1_000.0,
        loan_to_value=0.70,
        liquidation_threshold=0.75,
        underlying_amount=100 * 10**8,
        decimals=8,
    )


@pytest.fixture
def usdc_borrow() -> BorrowPosition:
    return BorrowPosition(coin_type=USDC, value_usd=500.0, decimals=6)


class TestLiquidationPrice:
    def test_single_collateral(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        # 100 * p * 0.75 = 500  =>  p = 6.666...
        assert liquidation_price([apt_deposit], [usdc_borrow], APT) == pytest.approx(500 / 75)

    def test_explicit_price(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        # Ratio is price independent
        price = liquidation_price([apt_deposit], [usdc_borrow], APT, price_usd=20.0)
        assert price == pytest.approx(20.0 * 500 / 750)

    def test_no_debt(self, apt_deposit: DepositPosition) -> None:
        assert liquidation_price([apt_deposit], [], APT) == 0.0

    def test_asset_not_held(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        assert liquidation_price([apt_deposit], [usdc_borrow], USDC) == 0.0

    def test_other_collateral_covers_debt(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        usdc_deposit = DepositPosition(
            coin_type=USDC, value_usd=1_000.0, loan_to_value=0.80, liquidation_threshold=0.85
        )
        # USDC alone gives HF 1.7, so no APT price liquidates
        assert liquidation_price([apt_deposit, usdc_deposit], [usdc_borrow], APT) == 0.0


class TestLiquidationPriceDrop:
    def test_drop(self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition) -> None:
        # HF = 1.5  =>  drop = 1 - 1/1.5
        assert liquidation_price_drop([apt_deposit], [usdc_borrow]) == pytest.approx(1 / 3)

    def test_no_debt_is_infinite(self, apt_deposit: DepositPosition) -> None:
        assert math.isinf(liquidation_price_drop([apt_deposit], []))

    def test_already_liquidatable(self, apt_deposit: DepositPosition) -> None:
        borrow = BorrowPosition(coin_type=USDC, value_usd=900.0)
        assert liquidation_price_drop([apt_deposit], [borrow]) == 0.0


class TestPriceSensitivity:
    def test_shape(self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition) -> None:
        df = price_sensitivity([apt_deposit], [usdc_borrow], APT, n_points=11)
        assert len(df) == 11
        assert list(df.columns) == ["price_change", "health_factor"]

    def test_unshocked_point_matches_current(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        df = price_sensitivity([apt_deposit], [usdc_borrow], APT, n_points=11)
        mid = df.iloc[5]
        assert mid["price_change"] == pytest.approx(0.0)
        assert mid["health_factor"] == pytest.approx(1.5)

    def test_health_factor_rises_with_price(
        self, apt_deposit: DepositPosition, usdc_borrow: BorrowPosition
    ) -> None:
        df = price_sensitivity([apt_deposit], [usdc_borrow], APT)
        assert df["health_factor"].is_monotonic_increasing
