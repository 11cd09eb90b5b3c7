"""E-mode category dataclass."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EModeCategory:
    """Aries Efficiency Mode category parameters."""

    category_id: int
    name: str
    max_ltv: float  # e.g. 0.90
    liquidation_threshold: float  # e.g. 0.95
    liquidation_penalty: float  # e.g. 0.02 (2%)
    eligible_assets: frozenset[str]
    description: str = ""

    def __post_init__(self) -> None:
        if self.liquidation_threshold < self.max_ltv:
            raise ValueError(
                f"E-mode category {self.category_id}: liquidation_threshold "
                f"({self.liquidation_threshold}) must be >= max_ltv ({self.max_ltv})"
            )
        # Accept any iterable of coin types; store a closed set.
        object.__setattr__(self, "eligible_assets", frozenset(self.eligible_assets))

    def is_eligible(self, coin_type: str) -> bool:
        return coin_type in self.eligible_assets
