"""Value objects consumed and produced by the engine."""

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
from amm_engine.models.state import PoolInternalState

__all__ = [
    "Asset",
    "PoolReserves",
    "FeeParams",
    "AmplifierParams",
    "ConstantProduct",
    "Stableswap",
    "PoolType",
    "PoolSnapshot",
    "PoolInternalState",
]
