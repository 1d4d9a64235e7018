"""Constant product (x * y = k) pool math."""

from __future__ import annotations

from amm_engine.errors import InsufficientLiquidityError, LiquidityExceededError
from amm_engine.math import isqrt
from amm_engine.safe_int import S


def get_constant_product_minted_liquidity_tokens(
    added_primary: int,
    added_secondary: int,
    total_primary: int,
    total_secondary: int,
    total_liquidity: int,
) -> int:
    """Liquidity tokens minted for a deposit.

    The first deposit mints the geometric mean of the amounts. Later deposits
    mint proportionally to the scarcer side; the excess of the other side is
    donated to the pool.

    Raises:
        InsufficientLiquidityError: If no tokens would be minted
    """
    if total_primary == 0 or total_secondary == 0:
        minted = isqrt(added_primary * added_secondary)
    else:
        liquidity = S(total_liquidity)
        from_primary = S(added_primary) * liquidity // S(total_primary)
        from_secondary = S(added_secondary) * liquidity // S(total_secondary)
        minted = from_primary.min(from_secondary).value

    if minted <= 0:
        raise InsufficientLiquidityError(
            "Amount of minted liquidity tokens must be greater than 0."
        )
    return minted


class ConstantProductCalculator:
    """Swap math for constant product pools.

    Formula: gross_received = liq_out * deposited / (liq_in + deposited)
    """

    def price(self, dec_liq_a: float, dec_liq_b: float, ratio: int = 1) -> float:
        if not dec_liq_a or not dec_liq_b:
            return 0.0
        return dec_liq_b / dec_liq_a

    def swap_gross_received(self, liq_in: int, liq_out: int, amount_deposited: int) -> int:
        return (S(liq_out) * S(amount_deposited) // (S(liq_in) + S(amount_deposited))).value

    def swap_amount_deposited(self, liq_in: int, liq_out: int, gross_received: int) -> int:
        """Deposit needed for a gross output, rounded up.

        Formula: deposited = ceil(liq_in * received / (liq_out - received))
        """
        if gross_received >= liq_out:
            raise LiquidityExceededError(
                f"Cannot receive {gross_received}, pool holds only {liq_out}"
            )
        numerator = S(liq_in) * S(gross_received)
        return numerator.ceiling_div(S(liq_out) - S(gross_received)).value

    def minted_liquidity_tokens(
        self,
        added_primary: int,
        added_secondary: int,
        total_primary: int,
        total_secondary: int,
        total_liquidity: int,
    ) -> int:
        return get_constant_product_minted_liquidity_tokens(
            added_primary, added_secondary, total_primary, total_secondary, total_liquidity
        )
