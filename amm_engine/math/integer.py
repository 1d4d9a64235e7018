"""Arbitrary-precision integer helpers.

No floating point is used anywhere in this module: the results feed token
amounts that must match the on-chain integer math bit for bit.
"""


def isqrt(n: int) -> int:
    """Return the largest integer r such that r * r <= n.

    Algorithm:
        1. n < 2: the root is n itself
        2. n < 16: step up from 1 (at most 3 steps)
        3. Otherwise Newton over integers: x = (n // x + x) // 2, starting
           from a power of two that is >= sqrt(n). Iterates decrease
           strictly until they reach floor(sqrt(n)); the first iterate
           that does not decrease marks convergence.

    Raises:
        ValueError: If n is negative
    """
    if n < 0:
        raise ValueError(f"isqrt of negative number: {n}")
    if n < 2:
        return n

    if n < 16:
        r = 1
        while (r + 1) * (r + 1) <= n:
            r += 1
        return r

    x = 1 << ((n.bit_length() + 1) // 2)
    while True:
        y = (n // x + x) // 2
        if y >= x:
            return x
        x = y


def solve_quadratic_floor(a: int, b: int, c: int) -> int:
    """Floor of the positive root of a*x^2 + b*x + c = 0.

    The roots must have opposite signs (a * c < 0), which holds for both
    users in this package:

    - a > 0 (stableswap balance, a = 1): (-b + sqrt(D)) / (2a). This is the
      exact expression the pool contract evaluates, for either sign of b.
    - a < 0 (zap split): (-b - sqrt(D)) / (2a) when b < 0, otherwise the
      equivalent 2c / (-b + sqrt(D)), which avoids dividing two nearly
      equal magnitudes.

    sqrt is the integer floor root of the discriminant D = b^2 - 4ac.

    Raises:
        ValueError: If a is zero or the discriminant is negative
    """
    if a == 0:
        raise ValueError("Leading coefficient must be non-zero")
    delta = b * b - 4 * a * c
    if delta < 0:
        raise ValueError(f"Quadratic has no real roots (discriminant {delta})")
    root = isqrt(delta)

    if a > 0:
        return (-b + root) // (2 * a)
    if b < 0:
        return (-b - root) // (2 * a)
    return (2 * c) // (-b + root)


def ceil_div(numerator: int, denominator: int) -> int:
    """Ceiling division for signed ints.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    return -(-numerator // denominator)
