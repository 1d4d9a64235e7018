"""Swap preview.

A Swap validates its inputs and records the effect the swap would have on
the pool at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass

from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.errors import ValidationError
from amm_engine.models.pools import Asset, PoolSnapshot
from amm_engine.pool_calculator import PoolCalculator, validate_slippage_bps


@dataclass(frozen=True)
class SwapEffect:
    """Effect of a swap on the pool.

    Amounts are integers in smallest units. Prices and price impacts are
    display values; a price impact is nan when the price is unknown.

    Attributes:
        amount_deposited: Amount of the deposited asset sent to the pool
        amount_received: Amount of the other asset received, net of the fee
        minimum_amount_received: Lowest output accepted under the slippage tolerance
        fee: Trade fee, in units of the received asset
        price: Gross amount received per amount deposited, in whole tokens
        primary_asset_price_after_swap: Primary asset price after the swap
        secondary_asset_price_after_swap: Secondary asset price after the swap
        primary_asset_price_impact_pct: Primary asset price change in percent
        secondary_asset_price_impact_pct: Secondary asset price change in percent
    """

    amount_deposited: int
    amount_received: int
    minimum_amount_received: int
    fee: int
    price: float
    primary_asset_price_after_swap: float
    secondary_asset_price_after_swap: float
    primary_asset_price_impact_pct: float
    secondary_asset_price_impact_pct: float


class Swap:
    """A hypothetical swap of one pool asset for the other.

    Args:
        pool: Pool snapshot
        asset_deposited: Asset sent to the pool
        amount: Amount to deposit, or to receive when is_reversed is True
        slippage_bps: Slippage tolerance in basis points (0..10000)
        is_reversed: Treat amount as the exact net amount to receive. The pool
            contract only accepts exact deposits; the deposit is computed here.
        calculator: Pre-built calculator for the same snapshot (optional)
        now: Time (UNIX ms) for the stableswap amplifier
        config: Engine configuration

    Raises:
        ValidationError: For invalid slippage, asset, amount or an empty pool
        LiquidityExceededError: If an exact receive amount cannot be paid
    """

    def __init__(
        self,
        pool: PoolSnapshot,
        asset_deposited: Asset,
        amount: int,
        slippage_bps: int,
        is_reversed: bool = False,
        *,
        calculator: PoolCalculator | None = None,
        now: int | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.pool = pool
        self.asset_deposited = asset_deposited
        self.asset_received = pool.other_asset(asset_deposited)
        self.amount = amount
        self.slippage_bps = slippage_bps
        self.is_reversed = is_reversed
        self.calculator = calculator or PoolCalculator(pool, now, config)

        self._validate()
        self.effect = self._build_effect()

    def _validate(self) -> None:
        validate_slippage_bps(self.slippage_bps)
        if self.amount <= 0:
            raise ValidationError(f"Swap amount must be positive, got {self.amount}")
        if self.calculator.is_empty:
            raise ValidationError("Pool is empty and swaps are impossible.")

    def _build_effect(self) -> SwapEffect:
        calc = self.calculator
        asset = self.asset_deposited

        if self.is_reversed:
            amount_received = self.amount
            amount_deposited = calc.deposit_from_net_amount(asset, self.amount)
        else:
            amount_deposited = self.amount
            amount_received = calc.net_amount_from_deposit(asset, self.amount)

        if self.pool.is_primary(asset):
            primary_liq_change, secondary_liq_change = amount_deposited, -amount_received
        else:
            primary_liq_change, secondary_liq_change = -amount_received, amount_deposited

        primary, secondary = self.pool.primary_asset, self.pool.secondary_asset
        return SwapEffect(
            amount_deposited=amount_deposited,
            amount_received=amount_received,
            minimum_amount_received=calc.minimum_amount_received(
                calc.net_amount_from_deposit(asset, amount_deposited), self.slippage_bps
            ),
            fee=calc.fee(asset, amount_deposited),
            price=calc.swap_price(asset, amount_deposited),
            primary_asset_price_after_swap=calc.price_after_liquidity_change(
                primary, primary_liq_change, secondary_liq_change
            ),
            secondary_asset_price_after_swap=calc.price_after_liquidity_change(
                secondary, primary_liq_change, secondary_liq_change
            ),
            primary_asset_price_impact_pct=calc.price_impact_pct(
                primary, primary_liq_change, secondary_liq_change
            ),
            secondary_asset_price_impact_pct=calc.price_impact_pct(
                secondary, primary_liq_change, secondary_liq_change
            ),
        )
