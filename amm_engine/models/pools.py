"""Pool snapshot dataclasses.

Immutable values describing a pool at one point in time. The caller builds
them from on-chain state; the engine never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TypeAlias

from amm_engine.constants import FEE_PRECISION
from amm_engine.errors import ValidationError


@dataclass(frozen=True)
class Asset:
    """An asset traded in a pool.

    Attributes:
        index: On-chain asset id (0 for the native asset)
        decimals: Number of decimal places of the smallest unit
        name: Optional display name
    """

    index: int
    decimals: int = 6
    name: str | None = None

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValidationError(f"Asset decimals cannot be negative, got {self.decimals}")

    @property
    def ratio(self) -> int:
        """Smallest units per whole token (10 ** decimals)."""
        return 10**self.decimals


@dataclass(frozen=True)
class PoolReserves:
    """Pool totals in smallest units."""

    total_primary: int
    total_secondary: int
    total_liquidity: int

    def __post_init__(self) -> None:
        for name in ("total_primary", "total_secondary", "total_liquidity"):
            value = getattr(self, name)
            if value < 0:
                raise ValidationError(f"{name} cannot be negative, got {value}")

    @property
    def is_empty(self) -> bool:
        return self.total_primary == 0 or self.total_secondary == 0


@dataclass(frozen=True)
class FeeParams:
    """Trade fees in basis points.

    Attributes:
        trade_fee_bps: Total fee charged on the gross amount received
        protocol_fee_bps: Part of trade_fee_bps that leaves the pool
    """

    trade_fee_bps: int
    protocol_fee_bps: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.trade_fee_bps <= FEE_PRECISION:
            raise ValidationError(
                f"trade_fee_bps must be in [0, {FEE_PRECISION}], got {self.trade_fee_bps}"
            )
        if not 0 <= self.protocol_fee_bps <= self.trade_fee_bps:
            raise ValidationError(
                f"protocol_fee_bps must be in [0, {self.trade_fee_bps}], "
                f"got {self.protocol_fee_bps}"
            )

    @property
    def pool_fee_bps(self) -> int:
        """Part of the trade fee retained by the pool's liquidity providers."""
        return self.trade_fee_bps - self.protocol_fee_bps


@dataclass(frozen=True)
class AmplifierParams:
    """Linear ramp of the stableswap amplification coefficient.

    Times are UNIX timestamps in milliseconds. A values are scaled by
    precision, matching the contract's fixed-point representation.
    """

    initial_a: int
    initial_a_time: int
    future_a: int
    future_a_time: int
    precision: int = 1

    def __post_init__(self) -> None:
        if self.initial_a_time > self.future_a_time:
            raise ValidationError(
                f"initial_a_time ({self.initial_a_time}) must not be after "
                f"future_a_time ({self.future_a_time})"
            )
        if self.initial_a < 0 or self.future_a < 0:
            raise ValidationError("Amplifier cannot be negative")
        if self.precision <= 0:
            raise ValidationError(f"precision must be positive, got {self.precision}")

    @classmethod
    def constant(cls, amplifier: int, precision: int = 1) -> AmplifierParams:
        """Parameters for an amplifier that is not ramping."""
        return cls(
            initial_a=amplifier,
            initial_a_time=0,
            future_a=amplifier,
            future_a_time=0,
            precision=precision,
        )


@dataclass(frozen=True)
class ConstantProduct:
    """x * y = k pool."""


@dataclass(frozen=True)
class Stableswap:
    """Curve-style stableswap pool."""

    amplifier: AmplifierParams


# Pool type is chosen once per snapshot
PoolType: TypeAlias = ConstantProduct | Stableswap


@dataclass(frozen=True)
class PoolSnapshot:
    """Everything the engine needs to know about a pool."""

    primary_asset: Asset
    secondary_asset: Asset
    reserves: PoolReserves
    fees: FeeParams
    pool_type: PoolType

    def __post_init__(self) -> None:
        if self.primary_asset.index == self.secondary_asset.index:
            raise ValidationError("Pool assets must be different")

    def is_primary(self, asset: Asset) -> bool:
        """True if asset is the primary asset.

        Raises:
            ValidationError: If asset is not in the pool
        """
        if asset.index == self.primary_asset.index:
            return True
        if asset.index == self.secondary_asset.index:
            return False
        raise ValidationError(f"Asset {asset.index} is not in the pool")

    def other_asset(self, asset: Asset) -> Asset:
        """Return the secondary asset for the primary one and vice versa."""
        return self.secondary_asset if self.is_primary(asset) else self.primary_asset

    def with_reserves(self, reserves: PoolReserves) -> PoolSnapshot:
        """Copy of this snapshot with different reserves."""
        return replace(self, reserves=reserves)
