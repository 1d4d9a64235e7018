"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from amm_engine.constants import (
    MIN_LOCKED_LIQUIDITY,
    PRICE_PROBE_AMOUNT,
    PRICE_PROBE_RETRIES,
    STABLESWAP_ANN_MULTIPLIER,
    STABLESWAP_MAX_ITERATIONS,
)
from amm_engine.errors import ValidationError


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the calculators.

    Holds the constants that differ between deployed contract versions, so
    tests and callers can mirror a specific contract exactly.

    Attributes:
        max_iterations: Newton-Raphson iteration bound for the stableswap invariant
        ann_multiplier: Ann = A * ann_multiplier (4 for current contracts, 2 for legacy)
        price_retries: Attempts made by stableswap price estimation
        price_probe_amount: Largest amount deposited by the price probe
        min_locked_liquidity: Liquidity tokens locked on the first deposit
    """

    max_iterations: int = STABLESWAP_MAX_ITERATIONS
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER
    price_retries: int = PRICE_PROBE_RETRIES
    price_probe_amount: int = PRICE_PROBE_AMOUNT
    min_locked_liquidity: int = MIN_LOCKED_LIQUIDITY

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValidationError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.ann_multiplier <= 0:
            raise ValidationError(f"ann_multiplier must be positive, got {self.ann_multiplier}")
        if self.price_retries <= 0:
            raise ValidationError(f"price_retries must be positive, got {self.price_retries}")
        if self.price_probe_amount <= 0:
            raise ValidationError(
                f"price_probe_amount must be positive, got {self.price_probe_amount}"
            )
        if self.min_locked_liquidity < 0:
            raise ValidationError(
                f"min_locked_liquidity cannot be negative, got {self.min_locked_liquidity}"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from AMM_ENGINE_* environment variables.

        Unset variables keep their defaults.
        """
        return cls(
            max_iterations=int(
                os.environ.get("AMM_ENGINE_MAX_ITERATIONS", str(STABLESWAP_MAX_ITERATIONS))
            ),
            ann_multiplier=int(
                os.environ.get("AMM_ENGINE_ANN_MULTIPLIER", str(STABLESWAP_ANN_MULTIPLIER))
            ),
            price_retries=int(os.environ.get("AMM_ENGINE_PRICE_RETRIES", str(PRICE_PROBE_RETRIES))),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
