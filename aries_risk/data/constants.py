"""Asset identifiers and protocol constants."""

# Coin types (Aptos Move type tags)
APT = "0x1::aptos_coin::AptosCoin"
STAPT = (
    "0xd11107bdf0d6d7040c6c0bfbdecb6545191fdf13e8d8d259952f53e1713f61b5"
    "::staked_coin::StakedAptos"
)
AMAPT = (
    "0x111ae3e5bc816a5e63c2da97d0aa3886519e0cd5e4b046659fa35796bd11542a"
    "::stapt_token::StakedApt"
)
USDC = "0xf22bede237a07e121b56d91a491eb7bcdfd1f5907926a9e58338f964a01b17fa::asset::USDC"
USDT = "0xf22bede237a07e121b56d91a491eb7bcdfd1f5907926a9e58338f964a01b17fa::asset::USDT"
WBTC = "0xf22bede237a07e121b56d91a491eb7bcdfd1f5907926a9e58338f964a01b17fa::asset::WBTC"

# E-mode category IDs (0 means no category is active)
EMODE_NONE = 0
EMODE_APTOS_ECOSYSTEM = 1
EMODE_STABLECOINS = 2

# Decimals
APT_DECIMALS = 8
STABLECOIN_DECIMALS = 6
DEFAULT_DECIMALS = 8

# Basis points per unit. All ratios inside the engine are decimal fractions;
# callers holding bps values divide by this at the boundary.
BPS = 10_000

# Health factor classification boundaries
LIQUIDATION_HEALTH_FACTOR = 1.0
DANGER_HEALTH_FACTOR = 1.2
WARNING_HEALTH_FACTOR = 1.5

# Default solver / transition targets
DEFAULT_WITHDRAW_TARGET_HF = 1.2
DEFAULT_BORROW_TARGET_HF = 1.3
DEFAULT_EMODE_MIN_SAFE_HF = 1.5

# Health factors above this are displayed as unbounded
HEALTH_FACTOR_DISPLAY_CAP = 999.0

# E-mode liquidation penalty at which the category is rated "same" risk (5%)
EMODE_PENALTY_BAND = 0.05

# E-mode recommendation bands on borrowing power improvement, in percent
EMODE_HIGHLY_RECOMMENDED_PCT = 20.0
EMODE_RECOMMENDED_PCT = 10.0

DAYS_PER_YEAR = 365
