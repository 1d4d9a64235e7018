"""Pydantic model for a pool contract's decoded global state.

The surrounding SDK decodes the contract's key-value store into a plain
mapping (keys as stored on chain). PoolInternalState validates that mapping
and turns it into a PoolSnapshot.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from amm_engine.constants import FEE_PRECISION
from amm_engine.models.pools import (
    AmplifierParams,
    Asset,
    ConstantProduct,
    FeeParams,
    PoolReserves,
    PoolSnapshot,
    PoolType,
    Stableswap,
)

# Non-negative integer stored in a contract uint slot
Uint = Annotated[int, Field(ge=0)]

# Contract key -> field name
_AMPLIFIER_KEYS = {
    "INITIAL_A": "initial_a",
    "INITIAL_A_TIME": "initial_a_time",
    "FUTURE_A": "future_a",
    "FUTURE_A_TIME": "future_a_time",
}


class PoolInternalState(BaseModel):
    """Global state of a pool contract.

    A stableswap pool is recognized by the presence of its amplifier keys.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    total_primary: Uint = Field(alias="A")
    total_secondary: Uint = Field(alias="B")
    total_liquidity: Uint = Field(alias="L")
    primary_asset_id: Uint = Field(alias="ASSET_A")
    secondary_asset_id: Uint = Field(alias="ASSET_B")
    fee_bps: int = Field(alias="FEE_BPS", ge=0, le=FEE_PRECISION)
    protocol_fee_bps: int = Field(default=0, alias="PACT_FEE_BPS", ge=0, le=FEE_PRECISION)
    initial_a: Uint | None = Field(default=None, alias="INITIAL_A")
    initial_a_time: int | None = Field(default=None, alias="INITIAL_A_TIME")
    future_a: Uint | None = Field(default=None, alias="FUTURE_A")
    future_a_time: int | None = Field(default=None, alias="FUTURE_A_TIME")
    precision: int = Field(default=1, alias="PRECISION", gt=0)

    @model_validator(mode="before")
    @classmethod
    def _check_amplifier_keys(cls, data: Any) -> Any:
        """Amplifier keys come all together or not at all."""
        if isinstance(data, dict):
            present = [
                key
                for key, field in _AMPLIFIER_KEYS.items()
                if data.get(key) is not None or data.get(field) is not None
            ]
            if present and len(present) != len(_AMPLIFIER_KEYS):
                missing = sorted(set(_AMPLIFIER_KEYS) - set(present))
                raise ValueError(f"Incomplete stableswap state, missing {missing}")
        return data

    @property
    def is_stableswap(self) -> bool:
        return self.initial_a is not None

    def pool_type(self) -> PoolType:
        if (
            self.initial_a is None
            or self.initial_a_time is None
            or self.future_a is None
            or self.future_a_time is None
        ):
            return ConstantProduct()
        return Stableswap(
            AmplifierParams(
                initial_a=self.initial_a,
                initial_a_time=self.initial_a_time,
                future_a=self.future_a,
                future_a_time=self.future_a_time,
                precision=self.precision,
            )
        )

    def to_snapshot(self, primary_decimals: int = 6, secondary_decimals: int = 6) -> PoolSnapshot:
        """Build the engine's snapshot. Decimals are not stored in pool state."""
        return PoolSnapshot(
            primary_asset=Asset(index=self.primary_asset_id, decimals=primary_decimals),
            secondary_asset=Asset(index=self.secondary_asset_id, decimals=secondary_decimals),
            reserves=PoolReserves(
                total_primary=self.total_primary,
                total_secondary=self.total_secondary,
                total_liquidity=self.total_liquidity,
            ),
            fees=FeeParams(
                trade_fee_bps=self.fee_bps,
                protocol_fee_bps=self.protocol_fee_bps,
            ),
            pool_type=self.pool_type(),
        )
