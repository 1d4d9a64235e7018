"""Integer math primitives for pool calculations.

- isqrt: floor square root using integer-only Newton iteration
- solve_quadratic_floor: floor of the positive root of a quadratic
- ceil_div: ceiling division on signed ints
"""

from amm_engine.math.integer import ceil_div, isqrt, solve_quadratic_floor

__all__ = ["ceil_div", "isqrt", "solve_quadratic_floor"]
