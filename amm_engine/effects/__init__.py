"""Trade effect builders.

Each builder validates its inputs and computes an immutable effect value
at construction:
- Swap -> SwapEffect
- LiquidityAddition -> LiquidityAdditionEffect
- Zap -> ZapEffect
"""

from amm_engine.effects.liquidity import LiquidityAddition, LiquidityAdditionEffect
from amm_engine.effects.swap import Swap, SwapEffect
from amm_engine.effects.zap import (
    Zap,
    ZapEffect,
    ZapPlan,
    get_constant_product_zap_params,
    get_swap_amount_deposited_from_zapping,
)

__all__ = [
    "Swap",
    "SwapEffect",
    "LiquidityAddition",
    "LiquidityAdditionEffect",
    "Zap",
    "ZapEffect",
    "ZapPlan",
    "get_constant_product_zap_params",
    "get_swap_amount_deposited_from_zapping",
]
