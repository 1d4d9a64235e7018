"""AMM trade-preview engine.

Previews the exact integer effect of swaps, liquidity additions and zaps
on constant product and stableswap pools.
"""

from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.effects import (
    LiquidityAddition,
    LiquidityAdditionEffect,
    Swap,
    SwapEffect,
    Zap,
    ZapEffect,
    ZapPlan,
)
from amm_engine.errors import (
    AmmEngineError,
    ConvergenceError,
    InsufficientLiquidityError,
    LiquidityExceededError,
    ValidationError,
)
from amm_engine.models import (
    AmplifierParams,
    Asset,
    ConstantProduct,
    FeeParams,
    PoolInternalState,
    PoolReserves,
    PoolSnapshot,
    Stableswap,
)
from amm_engine.pool_calculator import PoolCalculator

__version__ = "0.1.0"
__all__ = [
    "__version__",
    # Configuration
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    # Models
    "Asset",
    "PoolReserves",
    "FeeParams",
    "AmplifierParams",
    "ConstantProduct",
    "Stableswap",
    "PoolSnapshot",
    "PoolInternalState",
    # Calculation
    "PoolCalculator",
    "Swap",
    "SwapEffect",
    "LiquidityAddition",
    "LiquidityAdditionEffect",
    "Zap",
    "ZapEffect",
    "ZapPlan",
    # Errors
    "AmmEngineError",
    "ConvergenceError",
    "ValidationError",
    "LiquidityExceededError",
    "InsufficientLiquidityError",
]
