"""Pool-type agnostic trade math.

PoolCalculator wraps the constant product or stableswap calculator chosen
for a snapshot and layers fees, slippage, prices and price impact on top.
Trade amounts stay integers; only display prices are floats.
"""

from __future__ import annotations

import math

import structlog

from amm_engine.calculators import ConstantProductCalculator, StableswapCalculator
from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.constants import FEE_PRECISION, MAX_SLIPPAGE_BPS
from amm_engine.errors import ValidationError
from amm_engine.math import ceil_div
from amm_engine.models.pools import Asset, ConstantProduct, PoolSnapshot, Stableswap
from amm_engine.safe_int import S

logger = structlog.get_logger()


def validate_slippage_bps(slippage_bps: int) -> None:
    """Raise ValidationError unless 0 <= slippage_bps <= MAX_SLIPPAGE_BPS."""
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ValidationError(f"Slippage must be between 0 and {MAX_SLIPPAGE_BPS} bps")


class PoolCalculator:
    """Trade math for one pool snapshot.

    The swap calculator is selected once, from the snapshot's pool type.

    Attributes:
        pool: The snapshot the calculator was built for
        swap_calculator: ConstantProductCalculator or StableswapCalculator
    """

    swap_calculator: ConstantProductCalculator | StableswapCalculator

    def __init__(
        self,
        pool: PoolSnapshot,
        now: int | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        """Initialize the calculator.

        Args:
            pool: Pool snapshot
            now: Time (UNIX ms) at which the stableswap amplifier is evaluated;
                defaults to the current time
            config: Engine configuration
        """
        self.pool = pool
        self.config = config
        if isinstance(pool.pool_type, Stableswap):
            self.swap_calculator = StableswapCalculator(pool.pool_type.amplifier, now, config)
            if pool.primary_asset.decimals != pool.secondary_asset.decimals:
                # Price estimation scales both reserves by the primary ratio
                logger.warning(
                    "stableswap_decimals_mismatch",
                    primary_decimals=pool.primary_asset.decimals,
                    secondary_decimals=pool.secondary_asset.decimals,
                )
        elif isinstance(pool.pool_type, ConstantProduct):
            self.swap_calculator = ConstantProductCalculator()
        else:
            raise ValidationError(f"Unknown pool type: {pool.pool_type!r}")

    @property
    def is_stableswap(self) -> bool:
        return isinstance(self.swap_calculator, StableswapCalculator)

    @property
    def fee_bps(self) -> int:
        return self.pool.fees.trade_fee_bps

    @property
    def primary_asset_amount(self) -> int:
        return self.pool.reserves.total_primary

    @property
    def secondary_asset_amount(self) -> int:
        return self.pool.reserves.total_secondary

    @property
    def primary_asset_amount_decimal(self) -> float:
        return self.primary_asset_amount / self.pool.primary_asset.ratio

    @property
    def secondary_asset_amount_decimal(self) -> float:
        return self.secondary_asset_amount / self.pool.secondary_asset.ratio

    @property
    def is_empty(self) -> bool:
        return self.pool.reserves.is_empty

    # --- Prices ---

    @property
    def primary_asset_price(self) -> float:
        """Price of the primary asset in units of the secondary asset."""
        return self.swap_calculator.price(
            self.primary_asset_amount_decimal,
            self.secondary_asset_amount_decimal,
            self.pool.primary_asset.ratio,
        )

    @property
    def secondary_asset_price(self) -> float:
        """Price of the secondary asset in units of the primary asset."""
        return self.swap_calculator.price(
            self.secondary_asset_amount_decimal,
            self.primary_asset_amount_decimal,
            self.pool.primary_asset.ratio,
        )

    def asset_price(self, asset: Asset) -> float:
        if self.pool.is_primary(asset):
            return self.primary_asset_price
        return self.secondary_asset_price

    def price_after_liquidity_change(
        self,
        asset: Asset,
        primary_liq_change: int,
        secondary_liq_change: int,
    ) -> float:
        """Price of asset if the reserves moved by the given (signed) amounts."""
        new_primary = (
            self.primary_asset_amount + primary_liq_change
        ) / self.pool.primary_asset.ratio
        new_secondary = (
            self.secondary_asset_amount + secondary_liq_change
        ) / self.pool.secondary_asset.ratio
        ratio = self.pool.primary_asset.ratio
        if self.pool.is_primary(asset):
            return self.swap_calculator.price(new_primary, new_secondary, ratio)
        return self.swap_calculator.price(new_secondary, new_primary, ratio)

    def price_impact_pct(
        self,
        asset: Asset,
        primary_liq_change: int,
        secondary_liq_change: int,
    ) -> float:
        """Relative price change of asset, in percent, for a reserve change.

        Returns nan when the current price is 0 or unknown.
        """
        new_price = self.price_after_liquidity_change(
            asset, primary_liq_change, secondary_liq_change
        )
        old_price = self.asset_price(asset)
        if not old_price or math.isnan(old_price):
            return math.nan
        return (new_price / old_price - 1) * 100

    def swap_price(self, asset_deposited: Asset, amount_deposited: int) -> float:
        """Received per deposited (gross), in whole tokens of each asset."""
        asset_received = self.pool.other_asset(asset_deposited)
        amount_received = self.gross_amount_from_deposit(asset_deposited, amount_deposited)
        if amount_deposited == 0:
            return 0.0
        diff_ratio = asset_deposited.ratio / asset_received.ratio
        return amount_received / amount_deposited * diff_ratio

    # --- Swap amounts ---

    def liquidities(self, asset: Asset) -> tuple[int, int]:
        """Reserves ordered as (liq_in, liq_out) for a deposit of asset."""
        primary, secondary = self.primary_asset_amount, self.secondary_asset_amount
        if self.pool.is_primary(asset):
            return primary, secondary
        return secondary, primary

    def gross_amount_from_deposit(self, asset: Asset, amount_deposited: int) -> int:
        liq_in, liq_out = self.liquidities(asset)
        return self.swap_calculator.swap_gross_received(liq_in, liq_out, amount_deposited)

    def amount_deposited_from_gross(self, asset: Asset, gross_received: int) -> int:
        liq_in, liq_out = self.liquidities(asset)
        return self.swap_calculator.swap_amount_deposited(liq_in, liq_out, gross_received)

    def net_amount_from_deposit(self, asset: Asset, amount_deposited: int) -> int:
        return self.apply_trade_fee(self.gross_amount_from_deposit(asset, amount_deposited))

    def deposit_from_net_amount(self, asset: Asset, net_received: int) -> int:
        """Deposit needed to receive net_received after the trade fee.

        Raises:
            LiquidityExceededError: If the pool cannot pay that much
        """
        return self.amount_deposited_from_gross(asset, self.remove_trade_fee(net_received))

    # --- Fees ---

    def apply_trade_fee(self, gross_amount: int) -> int:
        """Net amount after the trade fee, rounded down."""
        return (S(gross_amount) * S(FEE_PRECISION - self.fee_bps) // FEE_PRECISION).value

    def fee_from_gross(self, gross_amount: int) -> int:
        return gross_amount - self.apply_trade_fee(gross_amount)

    def remove_trade_fee(self, net_amount: int) -> int:
        """Gross amount needed to end with net_amount after the fee, rounded up."""
        if self.fee_bps >= FEE_PRECISION:
            raise ValidationError("Trade fee consumes the whole amount received")
        return ceil_div(net_amount * FEE_PRECISION, FEE_PRECISION - self.fee_bps)

    def fee(self, asset: Asset, amount_deposited: int) -> int:
        """Trade fee paid, in units of the received asset."""
        return self.fee_from_gross(self.gross_amount_from_deposit(asset, amount_deposited))

    def minimum_amount_received(self, net_amount: int, slippage_bps: int) -> int:
        """Lowest output accepted under the slippage tolerance."""
        validate_slippage_bps(slippage_bps)
        return (S(net_amount) - S(net_amount) * S(slippage_bps) // FEE_PRECISION).value
