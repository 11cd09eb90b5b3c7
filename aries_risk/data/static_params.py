"""Static params provider with hardcoded Aries Markets parameters."""

from aries_risk.data.constants import (
    AMAPT,
    APT,
    APT_DECIMALS,
    EMODE_APTOS_ECOSYSTEM,
    EMODE_STABLECOINS,
    STABLECOIN_DECIMALS,
    STAPT,
    USDC,
    USDT,
    WBTC,
)
from aries_risk.data.interfaces import AssetParams, RiskParamsProvider
from aries_risk.protocol.emode import EModeCategory

# --- Paired pool parameters published by Aries Markets ---

_ASSET_PARAMS: dict[str, AssetParams] = {
    APT: AssetParams(
        symbol="APT",
        decimals=APT_DECIMALS,
        loan_to_value=0.70,
        liquidation_threshold=0.75,
        borrow_factor=1.0,
        liquidation_bonus=0.03,
    ),
    USDC: AssetParams(
        symbol="USDC",
        decimals=STABLECOIN_DECIMALS,
        loan_to_value=0.80,
        liquidation_threshold=0.85,
        borrow_factor=1.0,
        liquidation_bonus=0.03,
    ),
    USDT: AssetParams(
        symbol="USDT",
        decimals=STABLECOIN_DECIMALS,
        loan_to_value=0.80,
        liquidation_threshold=0.85,
        borrow_factor=1.0,
        liquidation_bonus=0.03,
    ),
    WBTC: AssetParams(
        symbol="WBTC",
        decimals=6,
        loan_to_value=0.61,
        liquidation_threshold=0.66,
        borrow_factor=0.90,
        liquidation_bonus=0.03,
    ),
}

_EMODE_CATEGORIES: dict[int, EModeCategory] = {
    EMODE_APTOS_ECOSYSTEM: EModeCategory(
        category_id=EMODE_APTOS_ECOSYSTEM,
        name="Aptos Ecosystem",
        description="Correlated Aptos assets (APT, stAPT, amAPT)",
        max_ltv=0.90,
        liquidation_threshold=0.95,
        liquidation_penalty=0.02,
        eligible_assets=frozenset({APT, STAPT, AMAPT}),
    ),
    EMODE_STABLECOINS: EModeCategory(
        category_id=EMODE_STABLECOINS,
        name="Stablecoins",
        description="USD-pegged stablecoins (USDC, USDT)",
        max_ltv=0.80,
        liquidation_threshold=0.85,
        liquidation_penalty=0.04,
        eligible_assets=frozenset({USDC, USDT}),
    ),
}


class StaticDataProvider(RiskParamsProvider):
    """Params provider using the built-in Aries Markets tables.

    Custom tables can be injected for tests or other deployments.
    """

    def __init__(
        self,
        asset_params: dict[str, AssetParams] | None = None,
        emode_categories: dict[int, EModeCategory] | None = None,
    ) -> None:
        self._asset_params = _ASSET_PARAMS if asset_params is None else asset_params
        self._emode_categories = (
            _EMODE_CATEGORIES if emode_categories is None else emode_categories
        )

    def get_asset_params(self, coin_type: str) -> AssetParams | None:
        return self._asset_params.get(coin_type)

    def get_emode_category(self, category_id: int) -> EModeCategory | None:
        return self._emode_categories.get(category_id)

    def list_emode_categories(self) -> list[EModeCategory]:
        return [self._emode_categories[k] for k in sorted(self._emode_categories)]
