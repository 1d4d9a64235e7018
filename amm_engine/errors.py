"""Engine error classes.

Every error raised for a caller-visible reason derives from AmmEngineError.
Arithmetic faults inside SafeInt stay ArithmeticError subclasses
(see amm_engine.safe_int).
"""


class AmmEngineError(Exception):
    """Base error for trade-preview operations."""

    pass


class ConvergenceError(AmmEngineError):
    """Newton-Raphson iteration for the stableswap invariant did not converge.

    Signals an unrealistic (extremely unbalanced) reserve ratio. Recoverable:
    price estimation retries with a different probe size.
    """

    pass


class ValidationError(AmmEngineError, ValueError):
    """Invalid caller input: slippage, asset membership, empty pool, parameters."""

    pass


class LiquidityExceededError(ValidationError):
    """Requested output is at least the whole reserve of the output asset."""

    pass


class InsufficientLiquidityError(AmmEngineError):
    """Minted liquidity tokens or fee coverage would be non-positive."""

    pass
