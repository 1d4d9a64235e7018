"""Liquidity addition preview."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.calculators import StableswapCalculator
from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.constants import FEE_PRECISION
from amm_engine.errors import ValidationError
from amm_engine.math import isqrt
from amm_engine.models.pools import PoolSnapshot
from amm_engine.pool_calculator import PoolCalculator, validate_slippage_bps

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiquidityAdditionEffect:
    """Effect of adding liquidity to a pool.

    Attributes:
        minted_liquidity_tokens: Liquidity tokens the deposit mints
        minimum_minted_liquidity_tokens: Lowest amount accepted under the slippage
            tolerance, net of the tokens locked on a first deposit
        amplifier: Stableswap amplifier (amp / precision), 0 for constant product
        bonus_pct: Stableswap bonus (negative: penalty) in percent, 0 for
            constant product
    """

    minted_liquidity_tokens: int
    minimum_minted_liquidity_tokens: int
    amplifier: float = 0.0
    bonus_pct: float = 0.0


class LiquidityAddition:
    """A hypothetical deposit of both pool assets.

    Either amount may be 0 for an existing pool; the first deposit needs both.

    Raises:
        ValidationError: For invalid slippage or amounts, or a first deposit
            too small to cover the locked liquidity
        InsufficientLiquidityError: If the deposit mints nothing or cannot
            cover the stableswap imbalance fee
    """

    def __init__(
        self,
        pool: PoolSnapshot,
        primary_amount: int,
        secondary_amount: int,
        slippage_bps: int = 0,
        *,
        calculator: PoolCalculator | None = None,
        now: int | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.pool = pool
        self.primary_amount = primary_amount
        self.secondary_amount = secondary_amount
        self.slippage_bps = slippage_bps
        self.config = config
        self.calculator = calculator or PoolCalculator(pool, now, config)

        self._validate()
        self.effect = self._build_effect()

    @property
    def is_first_deposit(self) -> bool:
        return self.pool.reserves.is_empty

    def _validate(self) -> None:
        validate_slippage_bps(self.slippage_bps)
        if self.primary_amount < 0 or self.secondary_amount < 0:
            raise ValidationError("Deposit amounts cannot be negative")
        if self.is_first_deposit:
            initial_liquidity = isqrt(self.primary_amount * self.secondary_amount)
            if initial_liquidity <= self.config.min_locked_liquidity:
                raise ValidationError("Provided amounts of tokens are too low.")

    def _build_effect(self) -> LiquidityAdditionEffect:
        calc = self.calculator
        reserves = self.pool.reserves
        amplifier = 0.0
        bonus_pct = 0.0

        swap_calculator = calc.swap_calculator
        if isinstance(swap_calculator, StableswapCalculator):
            amplifier = swap_calculator.amp / swap_calculator.precision
            bonus_pct = swap_calculator.add_liquidity_bonus_pct(
                self.primary_amount,
                self.secondary_amount,
                reserves.total_primary,
                reserves.total_secondary,
                calc.fee_bps,
            )
            minted = swap_calculator.minted_liquidity_tokens(
                self.primary_amount,
                self.secondary_amount,
                reserves.total_primary,
                reserves.total_secondary,
                reserves.total_liquidity,
                calc.fee_bps,
            )
        else:
            minted = swap_calculator.minted_liquidity_tokens(
                self.primary_amount,
                self.secondary_amount,
                reserves.total_primary,
                reserves.total_secondary,
                reserves.total_liquidity,
            )

        # Rounded to the nearest token, half up
        minimum_minted = (
            2 * minted * (FEE_PRECISION - self.slippage_bps) + FEE_PRECISION
        ) // (2 * FEE_PRECISION)
        if self.is_first_deposit:
            minimum_minted = max(0, minimum_minted - self.config.min_locked_liquidity)

        logger.debug(
            "liquidity_addition_previewed",
            primary_amount=self.primary_amount,
            secondary_amount=self.secondary_amount,
            minted=minted,
            bonus_pct=bonus_pct,
        )
        return LiquidityAdditionEffect(
            minted_liquidity_tokens=minted,
            minimum_minted_liquidity_tokens=minimum_minted,
            amplifier=amplifier,
            bonus_pct=bonus_pct,
        )
