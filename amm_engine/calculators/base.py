"""Capability shared by the pool-type specific calculators."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SwapCalculator(Protocol):
    """Protocol for pool swap math.

    Reserves are passed ordered as (liq_in, liq_out): the first argument is
    always the reserve of the asset being deposited. All amounts are
    integers in smallest units and no trade fee is applied here; fees are
    handled by PoolCalculator.
    """

    def price(self, dec_liq_a: float, dec_liq_b: float, ratio: int = 1) -> float:
        """Display price of asset A in units of asset B.

        Args:
            dec_liq_a: Reserve of the priced asset, in whole tokens
            dec_liq_b: Reserve of the other asset, in whole tokens
            ratio: Smallest units per whole token, for calculators that need
                integer reserves

        Returns:
            Price as float, 0 for an empty side
        """
        ...

    def swap_gross_received(self, liq_in: int, liq_out: int, amount_deposited: int) -> int:
        """Amount received for a deposit, before the trade fee."""
        ...

    def swap_amount_deposited(self, liq_in: int, liq_out: int, gross_received: int) -> int:
        """Amount to deposit to receive gross_received, before the trade fee.

        Raises:
            LiquidityExceededError: If gross_received >= liq_out
        """
        ...
