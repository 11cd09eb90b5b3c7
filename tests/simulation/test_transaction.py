"""Tests for the transaction simulator."""

import math

import pytest

from aries_risk.data.constants import APT, USDC, WBTC
from aries_risk.data.interfaces import (
    BorrowParams,
    BorrowPosition,
    DepositPosition,
    RepayParams,
    SupplyParams,
    WithdrawParams,
)
from aries_risk.data.static_params import StaticDataProvider
from aries_risk.position.risk import HealthStatus
from aries_risk.simulation.results import TransactionType
from aries_risk.simulation.transaction import (
    DANGER_ZONE_WARNING,
    apply_supply,
    apply_withdraw,
    simulate_borrow,
    simulate_repay,
    simulate_supply,
    simulate_transaction,
    simulate_withdraw,
)

APT_PRICE = 10.0
ONE_APT = 10**8
ONE_USDC = 10**6


@pytest.fixture
def deposits() -> list[DepositPosition]:
    # 100 APT at $10
    return [
        DepositPosition(
            coin_type=APT,
            value_usd=1_000.0,
            loan_to_value=0.70,
            liquidation_threshold=0.75,
            underlying_amount=100 * ONE_APT,
            decimals=8,
        )
    ]


@pytest.fixture
def borrows() -> list[BorrowPosition]:
    return [
        BorrowPosition(
            coin_type=USDC, value_usd=500.0, borrowed_amount=500 * ONE_USDC, decimals=6
        )
    ]


class TestSupply:
    def test_supply_existing_raises_health_factor(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_supply(deposits, borrows, SupplyParams(APT, 20 * ONE_APT), APT_PRICE)
        assert sim.current_health_factor == pytest.approx(1.5)
        assert sim.projected_health_factor == pytest.approx(1.8)
        assert sim.change == pytest.approx(0.3)
        assert sim.change_percent == pytest.approx(20.0)
        assert sim.is_safe
        assert sim.warning is None
        assert sim.total_collateral_usd == pytest.approx(1_200.0)

    def test_supply_never_lowers_health_factor(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        for amount in [0, 1, ONE_APT, 1_000 * ONE_APT]:
            sim = simulate_supply(deposits, borrows, SupplyParams(APT, amount), APT_PRICE)
            assert sim.projected_health_factor >= sim.current_health_factor

    def test_supply_new_asset(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_supply(
            deposits,
            borrows,
            SupplyParams(USDC, 1_000 * ONE_USDC),
            1.0,
            loan_to_value=0.80,
            liquidation_threshold=0.85,
            decimals=6,
        )
        assert sim.projected_health_factor == pytest.approx((750 + 850) / 500)

    def test_supply_does_not_mutate_inputs(self, deposits: list[DepositPosition]) -> None:
        before = list(deposits)
        projected = apply_supply(deposits, SupplyParams(APT, ONE_APT), APT_PRICE)
        assert deposits == before
        assert projected[0].underlying_amount == 101 * ONE_APT

    def test_new_asset_ratios_are_clamped(self) -> None:
        projected = apply_supply(
            [],
            SupplyParams(USDC, ONE_USDC),
            1.0,
            loan_to_value=1.5,
            liquidation_threshold=None,
            decimals=6,
        )
        assert projected[0].loan_to_value == 1.0
        assert projected[0].liquidation_threshold == 1.0

    def test_supply_not_as_collateral(self) -> None:
        projected = apply_supply(
            [], SupplyParams(APT, ONE_APT, use_as_collateral=False), APT_PRICE, 0.7, 0.75
        )
        assert not projected[0].is_collateral
        assert projected[0].loan_to_value == 0.0
        assert projected[0].liquidation_threshold == 0.0

    def test_non_collateral_supply_leaves_health_factor(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_supply(
            deposits,
            borrows,
            SupplyParams(USDC, 1_000 * ONE_USDC, use_as_collateral=False),
            1.0,
            loan_to_value=0.80,
            liquidation_threshold=0.85,
            decimals=6,
        )
        assert sim.projected_health_factor == pytest.approx(sim.current_health_factor)
        assert sim.projected_health_factor == pytest.approx(1.5)
        assert sim.total_collateral_usd == pytest.approx(2_000.0)

    def test_supply_without_debt(self, deposits: list[DepositPosition]) -> None:
        sim = simulate_supply(deposits, [], SupplyParams(APT, ONE_APT), APT_PRICE)
        assert math.isinf(sim.current_health_factor)
        assert sim.change == 0.0
        assert sim.change_percent == 0.0


class TestWithdraw:
    def test_partial_withdraw(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_withdraw(deposits, borrows, WithdrawParams(APT, 10 * ONE_APT), APT_PRICE)
        assert sim.projected_health_factor == pytest.approx(1.35)
        assert sim.projected_status == HealthStatus.WARNING
        assert sim.is_safe

    def test_withdraw_into_danger_zone(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_withdraw(deposits, borrows, WithdrawParams(APT, 25 * ONE_APT), APT_PRICE)
        assert sim.projected_health_factor == pytest.approx(1.125)
        assert sim.is_safe
        assert sim.warning == DANGER_ZONE_WARNING

    def test_withdraw_to_liquidation(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_withdraw(deposits, borrows, WithdrawParams(APT, 50 * ONE_APT), APT_PRICE)
        assert not sim.is_safe
        assert sim.projected_status == HealthStatus.LIQUIDATABLE
        assert sim.warning == "This withdraw would make position liquidatable"

    def test_withdraw_all(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_withdraw(
            deposits, borrows, WithdrawParams(APT, 0, withdraw_all=True), APT_PRICE
        )
        assert sim.projected_health_factor == 0.0
        assert sim.total_collateral_usd == 0.0

    def test_overdraw_drops_position(self, deposits: list[DepositPosition]) -> None:
        assert apply_withdraw(deposits, WithdrawParams(APT, 500 * ONE_APT), APT_PRICE) == []

    def test_withdraw_unheld_asset_is_noop(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_withdraw(deposits, borrows, WithdrawParams(WBTC, 1), 60_000.0)
        assert sim.projected_health_factor == sim.current_health_factor


class TestBorrow:
    def test_borrow_lowers_health_factor(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_borrow(deposits, borrows, BorrowParams(USDC, 250 * ONE_USDC), 1.0)
        assert sim.projected_health_factor == pytest.approx(1.0)
        assert sim.is_safe
        assert sim.warning == DANGER_ZONE_WARNING

    def test_borrow_new_asset_with_factor(self, deposits: list[DepositPosition]) -> None:
        sim = simulate_borrow(
            deposits,
            [],
            BorrowParams(WBTC, ONE_USDC // 100),
            45_000.0,
            borrow_factor=0.9,
            decimals=6,
        )
        # $450 of WBTC counts as $500
        assert sim.projected_health_factor == pytest.approx(1.5)
        assert math.isinf(sim.current_health_factor)

    def test_invalid_borrow_factor_defaults_to_one(
        self, deposits: list[DepositPosition]
    ) -> None:
        sim = simulate_borrow(
            deposits, [], BorrowParams(USDC, 500 * ONE_USDC), 1.0, borrow_factor=0.0, decimals=6
        )
        assert sim.projected_health_factor == pytest.approx(1.5)

    def test_borrow_to_liquidation(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_borrow(deposits, borrows, BorrowParams(USDC, 400 * ONE_USDC), 1.0)
        assert not sim.is_safe
        assert sim.warning == "This borrow would make position liquidatable"


class TestRepay:
    def test_repay_never_lowers_health_factor(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        for amount in [1, 100 * ONE_USDC, 499 * ONE_USDC]:
            sim = simulate_repay(deposits, borrows, RepayParams(USDC, amount), 1.0)
            assert sim.projected_health_factor >= sim.current_health_factor
            assert sim.is_safe

    def test_full_repay_is_infinite(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_repay(deposits, borrows, RepayParams(USDC, 0, repay_all=True), 1.0)
        assert math.isinf(sim.projected_health_factor)
        assert sim.total_borrow_usd == 0.0

    def test_repay_underwater_position_is_safe(self, deposits: list[DepositPosition]) -> None:
        borrows = [BorrowPosition(coin_type=USDC, value_usd=2_000.0, decimals=6)]
        sim = simulate_repay(deposits, borrows, RepayParams(USDC, ONE_USDC), 1.0)
        assert sim.projected_health_factor < 1.0
        assert sim.is_safe


class TestSimulateTransaction:
    def test_dispatch_by_string(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        sim = simulate_transaction(
            "withdraw", deposits, borrows, WithdrawParams(APT, 10 * ONE_APT), APT_PRICE
        )
        assert sim.action == TransactionType.WITHDRAW
        assert sim.projected_health_factor == pytest.approx(1.35)

    def test_params_from_provider(self, borrows: list[BorrowPosition]) -> None:
        sim = simulate_transaction(
            TransactionType.SUPPLY,
            [],
            borrows,
            SupplyParams(APT, 100 * ONE_APT),
            APT_PRICE,
            provider=StaticDataProvider(),
        )
        assert sim.projected_health_factor == pytest.approx(1.5)

    def test_explicit_params_override_provider(self, borrows: list[BorrowPosition]) -> None:
        sim = simulate_transaction(
            TransactionType.SUPPLY,
            [],
            borrows,
            SupplyParams(APT, 100 * ONE_APT),
            APT_PRICE,
            provider=StaticDataProvider(),
            liquidation_threshold=0.80,
        )
        assert sim.projected_health_factor == pytest.approx(1.6)

    def test_unknown_action(
        self, deposits: list[DepositPosition], borrows: list[BorrowPosition]
    ) -> None:
        with pytest.raises(ValueError):
            simulate_transaction("liquidate", deposits, borrows, BorrowParams(USDC, 1), 1.0)

    @pytest.mark.parametrize(
        ("action", "params"),
        [
            ("withdraw", SupplyParams(APT, ONE_APT)),
            ("supply", WithdrawParams(APT, ONE_APT)),
            ("borrow", RepayParams(USDC, ONE_USDC)),
            ("repay", BorrowParams(USDC, ONE_USDC)),
        ],
    )
    def test_params_must_match_action(
        self,
        deposits: list[DepositPosition],
        borrows: list[BorrowPosition],
        action: str,
        params: SupplyParams | WithdrawParams | BorrowParams | RepayParams,
    ) -> None:
        with pytest.raises(ValueError, match=action):
            simulate_transaction(action, deposits, borrows, params, APT_PRICE)
