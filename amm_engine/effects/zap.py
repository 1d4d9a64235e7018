"""Zap preview: add liquidity from a single asset.

A zap swaps part of the input for the other pool asset, then deposits both
legs. The swap leg is chosen so that, after the swap, the remaining input
and the swap output match the pool ratio.

Derivation (x = reserve of the input asset, y = the other reserve,
Z = input amount, s = swap leg, f = trade fee, pf = protocol fee):

    gross output  g  = y * s / (x + s),  net received r = g * (1 - f)
    after swap    x' = x + s,  y' = y - g * (1 - f + pf)
    ratio match   (Z - s) / x' = r / y'

which reduces to the quadratic

    (1 - pf) s^2 + (2x - x f - Z (f - pf)) s - x Z = 0

Multiplied by -10^4 the coefficients are exact integers in basis points.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.constants import FEE_PRECISION
from amm_engine.effects.liquidity import LiquidityAddition, LiquidityAdditionEffect
from amm_engine.effects.swap import Swap, SwapEffect
from amm_engine.errors import ValidationError
from amm_engine.math import solve_quadratic_floor
from amm_engine.models.pools import Asset, ConstantProduct, PoolReserves, PoolSnapshot
from amm_engine.pool_calculator import PoolCalculator, validate_slippage_bps
from amm_engine.safe_int import S

logger = structlog.get_logger()


def get_constant_product_zap_coefficients(
    zap_amount: int,
    total_amount: int,
    fee_bps: int,
    protocol_fee_bps: int,
) -> tuple[int, int, int]:
    """Integer coefficients (a, b, c) of the zap swap-leg quadratic.

    Args:
        zap_amount: Amount of the input asset being zapped (Z)
        total_amount: Pool reserve of the input asset (x)
        fee_bps: Total trade fee
        protocol_fee_bps: Part of the fee leaving the pool
    """
    pool_fee_bps = fee_bps - protocol_fee_bps
    a = protocol_fee_bps - FEE_PRECISION
    b = -2 * total_amount * FEE_PRECISION + zap_amount * pool_fee_bps + total_amount * fee_bps
    c = total_amount * zap_amount * FEE_PRECISION
    return a, b, c


def get_swap_amount_deposited_from_zapping(
    zap_amount: int,
    total_amount: int,
    fee_bps: int,
    protocol_fee_bps: int,
) -> int:
    """Part of the zap amount to swap for the other asset.

    Returns:
        The swap leg, floored and kept within [0, zap_amount]
    """
    if zap_amount <= 0:
        return 0
    a, b, c = get_constant_product_zap_coefficients(
        zap_amount, total_amount, fee_bps, protocol_fee_bps
    )
    swap_amount = solve_quadratic_floor(a, b, c)
    return max(0, min(swap_amount, zap_amount))


@dataclass(frozen=True)
class ZapPlan:
    """How a zap amount is split.

    swap_deposited plus the add-liquidity leg of the input asset always
    equals the zap amount.
    """

    swap_deposited: int
    add_liquidity_primary: int
    add_liquidity_secondary: int


def get_constant_product_zap_params(
    pool: PoolSnapshot,
    asset: Asset,
    amount: int,
    swap_received: int,
    swap_deposited: int,
) -> ZapPlan:
    """Build the zap plan from the swap leg and its net output.

    The other asset's leg is the swap output minus one unit, so rounding in
    the contract can never leave the deposit short.
    """
    input_leg = (S(amount) - S(swap_deposited)).value
    other_leg = max(swap_received - 1, 0)
    if pool.is_primary(asset):
        return ZapPlan(swap_deposited, input_leg, other_leg)
    return ZapPlan(swap_deposited, other_leg, input_leg)


@dataclass(frozen=True)
class ZapEffect:
    plan: ZapPlan
    swap: SwapEffect
    liquidity_addition: LiquidityAdditionEffect


class Zap:
    """A hypothetical single-asset liquidity addition to a constant product pool.

    Args:
        pool: Pool snapshot
        asset: Asset being zapped
        amount: Amount of asset to zap
        slippage_bps: Slippage tolerance in basis points, applied to both the
            swap and the liquidity addition
        config: Engine configuration

    Raises:
        ValidationError: For stableswap or empty pools, unknown assets,
            invalid amounts or slippage
    """

    def __init__(
        self,
        pool: PoolSnapshot,
        asset: Asset,
        amount: int,
        slippage_bps: int = 0,
        *,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.pool = pool
        self.asset = asset
        self.amount = amount
        self.slippage_bps = slippage_bps
        self.config = config

        self._validate()
        self.calculator = PoolCalculator(pool, config=config)
        self.effect = self._build_effect()

    def _validate(self) -> None:
        validate_slippage_bps(self.slippage_bps)
        # Raises for an asset outside the pool
        self.pool.is_primary(self.asset)
        if not isinstance(self.pool.pool_type, ConstantProduct):
            raise ValidationError("Zap can only be made on constant product pools.")
        if self.pool.reserves.is_empty:
            raise ValidationError("Cannot zap into an empty pool.")
        if self.amount <= 0:
            raise ValidationError(f"Zap amount must be positive, got {self.amount}")

    def _build_effect(self) -> ZapEffect:
        fees = self.pool.fees
        liq_in, _ = self.calculator.liquidities(self.asset)
        swap_deposited = get_swap_amount_deposited_from_zapping(
            self.amount, liq_in, fees.trade_fee_bps, fees.protocol_fee_bps
        )
        if swap_deposited == 0:
            raise ValidationError(f"Zap amount {self.amount} is too small to split")

        swap = Swap(
            self.pool,
            self.asset,
            swap_deposited,
            self.slippage_bps,
            calculator=self.calculator,
            config=self.config,
        ).effect
        plan = get_constant_product_zap_params(
            self.pool, self.asset, self.amount, swap.amount_received, swap_deposited
        )

        liquidity_addition = LiquidityAddition(
            self.pool.with_reserves(self._reserves_after_swap(swap)),
            plan.add_liquidity_primary,
            plan.add_liquidity_secondary,
            self.slippage_bps,
            config=self.config,
        ).effect

        logger.debug(
            "zap_previewed",
            asset=self.asset.index,
            amount=self.amount,
            swap_deposited=plan.swap_deposited,
            add_liquidity_primary=plan.add_liquidity_primary,
            add_liquidity_secondary=plan.add_liquidity_secondary,
        )
        return ZapEffect(plan=plan, swap=swap, liquidity_addition=liquidity_addition)

    def _reserves_after_swap(self, swap: SwapEffect) -> PoolReserves:
        """Pool reserves once the swap leg has executed.

        The output side loses the net amount and the protocol fee; the pool
        keeps the rest of the trade fee.
        """
        gross = swap.amount_received + swap.fee
        protocol_fee = (S(gross) * S(self.pool.fees.protocol_fee_bps) // FEE_PRECISION).value
        outflow = swap.amount_received + min(protocol_fee, swap.fee)

        reserves = self.pool.reserves
        if self.pool.is_primary(self.asset):
            primary = reserves.total_primary + swap.amount_deposited
            secondary = (S(reserves.total_secondary) - S(outflow)).value
        else:
            primary = (S(reserves.total_primary) - S(outflow)).value
            secondary = reserves.total_secondary + swap.amount_deposited
        return PoolReserves(primary, secondary, reserves.total_liquidity)
