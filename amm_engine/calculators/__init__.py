"""Pool-type specific swap calculators.

- ConstantProductCalculator: x * y = k pools
- StableswapCalculator: Curve-style stableswap pools
"""

from amm_engine.calculators.base import SwapCalculator
from amm_engine.calculators.constant_product import (
    ConstantProductCalculator,
    get_constant_product_minted_liquidity_tokens,
)
from amm_engine.calculators.stableswap import (
    StableswapCalculator,
    add_liquidity_fees,
    calculate_invariant,
    get_add_liquidity_bonus_pct,
    get_new_balance,
    get_stableswap_minted_liquidity_tokens,
)

__all__ = [
    "SwapCalculator",
    # Constant product
    "ConstantProductCalculator",
    "get_constant_product_minted_liquidity_tokens",
    # Stableswap
    "StableswapCalculator",
    "calculate_invariant",
    "get_new_balance",
    "add_liquidity_fees",
    "get_stableswap_minted_liquidity_tokens",
    "get_add_liquidity_bonus_pct",
]
