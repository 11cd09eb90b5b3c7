"""Normalized input types and static protocol parameters."""

from aries_risk.data.interfaces import (
    AssetParams,
    BorrowParams,
    BorrowPosition,
    DepositPosition,
    InterestRateConfig,
    RepayParams,
    Reserve,
    ReserveState,
    RiskParamsProvider,
    SupplyParams,
    WithdrawParams,
)
from aries_risk.data.static_params import StaticDataProvider

__all__ = [
    "AssetParams",
    "BorrowParams",
    "BorrowPosition",
    "DepositPosition",
    "InterestRateConfig",
    "RepayParams",
    "Reserve",
    "ReserveState",
    "RiskParamsProvider",
    "StaticDataProvider",
    "SupplyParams",
    "WithdrawParams",
]
