"""Stableswap (Curve-style) pool math for two assets.

Core functions mirror the pool contract's integer arithmetic exactly:
- calculate_invariant: Newton-Raphson solve for D
- get_new_balance: quadratic solve for one balance given D and the other
- add_liquidity_fees / minted tokens / bonus for liquidity additions

All financial calculations use SafeInt, so a division by zero or a negative
amount fails loudly instead of producing a wrong preview.
"""

from __future__ import annotations

import math
import time

import structlog

from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from amm_engine.constants import FEE_PRECISION, STABLESWAP_ANN_MULTIPLIER, STABLESWAP_MAX_ITERATIONS
from amm_engine.errors import (
    ConvergenceError,
    InsufficientLiquidityError,
    LiquidityExceededError,
    ValidationError,
)
from amm_engine.math import isqrt, solve_quadratic_floor
from amm_engine.models.pools import AmplifierParams
from amm_engine.safe_int import S

logger = structlog.get_logger()

N_COINS = 2


def calculate_invariant(
    liq_a: int,
    liq_b: int,
    amp: int,
    precision: int,
    *,
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER,
    max_iterations: int = STABLESWAP_MAX_ITERATIONS,
) -> int:
    """Calculate the stableswap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = S = liq_a + liq_b
        2. D_P = D^3 / (4 * liq_a * liq_b), computed one balance at a time
        3. D = D * (Ann * S / precision + 2 * D_P)
               / ((Ann - precision) * D / precision + 3 * D_P)
        4. Stop when |D_new - D_prev| <= 1

    Args:
        liq_a: Balance of the first asset
        liq_b: Balance of the second asset
        amp: Amplifier, scaled by precision
        precision: Fixed-point scale of amp
        ann_multiplier: Ann = amp * ann_multiplier
        max_iterations: Iteration bound

    Returns:
        The invariant D (0 for an empty pool)

    Raises:
        ConvergenceError: If iteration does not converge, or one balance is
            zero while the other is not
    """
    sum_balances = S(liq_a) + S(liq_b)
    if sum_balances == 0:
        return 0
    if liq_a == 0 or liq_b == 0:
        raise ConvergenceError(f"Invariant undefined for one-sided pool ({liq_a}, {liq_b})")

    ann = S(amp) * S(ann_multiplier)
    prec = S(precision)
    d = sum_balances
    d_prev = d

    for _ in range(max_iterations):
        d_p = (d * d) // (S(liq_a) * N_COINS)
        d_p = (d_p * d) // (S(liq_b) * N_COINS)
        d_prev = d

        numerator = d * ((ann * sum_balances) // prec + d_p * N_COINS)
        denominator = ((ann - prec) * d) // prec + d_p * (N_COINS + 1)
        d = numerator // denominator

        if d.abs_diff(d_prev) <= 1:
            return d.value

    raise ConvergenceError(f"Didn't converge D_prev={d_prev}, D={d}")


def get_new_balance(
    fixed_balance: int,
    amp: int,
    invariant: int,
    precision: int,
    *,
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER,
) -> int:
    """Solve for the other balance given one balance and the invariant D.

    The invariant reduces to x^2 + (b - D) x - c = 0 with
        b = fixed + D * precision / Ann
        c = precision * D^3 / (4 * fixed * Ann)

    Raises:
        DivisionByZero: If fixed_balance is zero
    """
    ann = S(amp) * S(ann_multiplier)
    d = S(invariant)
    fixed = S(fixed_balance)

    b = fixed + (d * S(precision)) // ann
    c = (S(precision) * (d * d * d)) // (S(4) * fixed * ann)

    return solve_quadratic_floor(1, b.value - d.value, -c.value)


def add_liquidity_fees(
    added_a: int,
    added_b: int,
    total_a: int,
    total_b: int,
    fee_bps: int,
    amp: int,
    precision: int,
    *,
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER,
    max_iterations: int = STABLESWAP_MAX_ITERATIONS,
) -> tuple[int, int]:
    """Balance-correction fee charged on a liquidity addition.

    The deposit is compared with an "ideal" deposit that keeps the current
    pool ratio (balances scaled by D1 / D0). Each asset pays
    fee_bps / 2 on its distance from the ideal balance, whichever asset the
    user actually supplied. For two assets the Curve fee factor
    n / (4 * (n - 1)) equals 1/2.

    Returns:
        (fee_a, fee_b) in smallest units
    """
    kwargs = {"ann_multiplier": ann_multiplier, "max_iterations": max_iterations}
    d0 = S(calculate_invariant(total_a, total_b, amp, precision, **kwargs))
    new_a = S(total_a) + S(added_a)
    new_b = S(total_b) + S(added_b)
    d1 = S(calculate_invariant(new_a.value, new_b.value, amp, precision, **kwargs))

    fees = []
    for old, new in ((total_a, new_a), (total_b, new_b)):
        ideal = d1 * S(old) // d0
        fee = S(fee_bps) * ideal.abs_diff(new) // (2 * FEE_PRECISION)
        fees.append(fee.value)
    return fees[0], fees[1]


def _balances_after_fees(
    added_a: int,
    added_b: int,
    total_a: int,
    total_b: int,
    fee_bps: int,
    amp: int,
    precision: int,
    **kwargs: int,
) -> tuple[int, int]:
    fee_a, fee_b = add_liquidity_fees(
        added_a, added_b, total_a, total_b, fee_bps, amp, precision, **kwargs
    )
    balance_a = total_a + added_a - fee_a
    balance_b = total_b + added_b - fee_b
    if balance_a < 0 or balance_b < 0:
        raise InsufficientLiquidityError("Pool liquidity too low to cover add liquidity fee")
    return balance_a, balance_b


def get_stableswap_minted_liquidity_tokens(
    added_a: int,
    added_b: int,
    total_a: int,
    total_b: int,
    total_liquidity: int,
    fee_bps: int,
    amp: int,
    precision: int,
    *,
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER,
    max_iterations: int = STABLESWAP_MAX_ITERATIONS,
) -> int:
    """Liquidity tokens minted for a deposit.

    The first deposit mints isqrt(added_a * added_b). Later deposits mint
    total_liquidity * (D2 - D0) / D0, where D2 is the invariant of the
    post-deposit balances net of the balance-correction fee.

    Raises:
        InsufficientLiquidityError: If the fee cannot be covered or no tokens
            would be minted
    """
    if total_a == 0 or total_b == 0:
        minted = isqrt(added_a * added_b)
    else:
        kwargs = {"ann_multiplier": ann_multiplier, "max_iterations": max_iterations}
        balance_a, balance_b = _balances_after_fees(
            added_a, added_b, total_a, total_b, fee_bps, amp, precision, **kwargs
        )
        d0 = calculate_invariant(total_a, total_b, amp, precision, **kwargs)
        d2 = calculate_invariant(balance_a, balance_b, amp, precision, **kwargs)
        if d2 <= d0:
            raise InsufficientLiquidityError(
                "Amount of minted liquidity tokens must be greater than 0."
            )
        minted = (S(total_liquidity) * (S(d2) - S(d0)) // S(d0)).value

    if minted <= 0:
        raise InsufficientLiquidityError(
            "Amount of minted liquidity tokens must be greater than 0."
        )
    return minted


def get_add_liquidity_bonus_pct(
    added_a: int,
    added_b: int,
    total_a: int,
    total_b: int,
    fee_bps: int,
    amp: int,
    precision: int,
    *,
    ann_multiplier: int = STABLESWAP_ANN_MULTIPLIER,
    max_iterations: int = STABLESWAP_MAX_ITERATIONS,
) -> float:
    """Bonus (or penalty, when negative) of a liquidity addition in percent.

    The value gained is what a proportional withdrawal of the newly minted
    share would return: (new_a + new_b) * (D2 - D0) / D2. A deposit that
    improves the pool balance gains more than it added.

    Returns:
        bonus_pct, 0.0 for an empty pool or an empty deposit

    Raises:
        InsufficientLiquidityError: If the fee cannot be covered
    """
    total_added = added_a + added_b
    if total_a == 0 or total_b == 0 or total_added == 0:
        return 0.0

    kwargs = {"ann_multiplier": ann_multiplier, "max_iterations": max_iterations}
    balance_a, balance_b = _balances_after_fees(
        added_a, added_b, total_a, total_b, fee_bps, amp, precision, **kwargs
    )
    d0 = calculate_invariant(total_a, total_b, amp, precision, **kwargs)
    d2 = calculate_invariant(balance_a, balance_b, amp, precision, **kwargs)

    pool_value = total_a + added_a + total_b + added_b
    value_gained = pool_value * (d2 - d0) / d2
    return (value_gained / total_added - 1) * 100


def current_time_ms() -> int:
    """Current UNIX time in milliseconds."""
    return time.time_ns() // 1_000_000


class StableswapCalculator:
    """Swap math for stableswap pools.

    The amplifier is evaluated once, at construction, for the given time so
    every preview built from one calculator is consistent.
    """

    def __init__(
        self,
        params: AmplifierParams,
        now: int | None = None,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.params = params
        self.config = config
        self.amp = self.amplifier(now)
        if self.amp * config.ann_multiplier < params.precision:
            raise ValidationError(
                f"Amplifier {self.amp} too low for precision {params.precision}"
            )

    @property
    def precision(self) -> int:
        return self.params.precision

    def amplifier(self, now: int | None = None) -> int:
        """Amplifier at time now (milliseconds), linearly interpolated.

        The result is rounded half up and clamped between initial_a and
        future_a, so any time after future_a_time yields future_a.
        """
        params = self.params
        dt = params.future_a_time - params.initial_a_time
        dv = params.future_a - params.initial_a
        if not dt or not dv:
            return params.future_a

        if now is None:
            now = current_time_ms()

        min_a, max_a = sorted((params.initial_a, params.future_a))
        numerator = params.initial_a * dt + (now - params.initial_a_time) * dv
        current_a = (2 * numerator + dt) // (2 * dt)
        return max(min_a, min(max_a, current_a))

    def invariant(self, liq_a: int, liq_b: int) -> int:
        return calculate_invariant(
            liq_a,
            liq_b,
            self.amp,
            self.precision,
            ann_multiplier=self.config.ann_multiplier,
            max_iterations=self.config.max_iterations,
        )

    def solve_other_balance(self, fixed_balance: int, invariant: int) -> int:
        return get_new_balance(
            fixed_balance,
            self.amp,
            invariant,
            self.precision,
            ann_multiplier=self.config.ann_multiplier,
        )

    def price(self, dec_liq_a: float, dec_liq_b: float, ratio: int = 1) -> float:
        """Display price derived from a simulated swap of asset B for asset A.

        The probe deposits min(price_probe_amount, 1% of either reserve) and
        shrinks tenfold on each retry. A probe that fails to converge or
        receives nothing moves on to the next attempt. This estimate is
        inaccurate for low liquidity pools.

        Returns:
            deposited / received, 0.0 for an empty side, nan if every
            attempt failed
        """
        if not dec_liq_a or not dec_liq_b:
            return 0.0

        liq_a = round(dec_liq_a * ratio)
        liq_b = round(dec_liq_b * ratio)
        probe = min(self.config.price_probe_amount, liq_a // 100, liq_b // 100)

        for attempt in range(self.config.price_retries):
            amount = probe // 10**attempt
            if amount <= 0:
                break
            try:
                received = self.swap_gross_received(liq_b, liq_a, amount)
            except ConvergenceError:
                logger.debug(
                    "stableswap_price_probe_not_converged",
                    attempt=attempt,
                    amount=amount,
                    liq_a=liq_a,
                    liq_b=liq_b,
                )
                continue
            if received == 0:
                logger.debug("stableswap_price_probe_empty", attempt=attempt, amount=amount)
                continue
            return amount / received

        return math.nan

    def swap_gross_received(self, liq_in: int, liq_out: int, amount_deposited: int) -> int:
        invariant = self.invariant(liq_in, liq_out)
        new_liq_out = self.solve_other_balance(liq_in + amount_deposited, invariant)
        if new_liq_out >= liq_out:
            return 0
        return liq_out - new_liq_out

    def swap_amount_deposited(self, liq_in: int, liq_out: int, gross_received: int) -> int:
        if gross_received >= liq_out:
            raise LiquidityExceededError(
                f"Cannot receive {gross_received}, pool holds only {liq_out}"
            )
        invariant = self.invariant(liq_in, liq_out)
        new_liq_in = self.solve_other_balance(liq_out - gross_received, invariant)
        return max(new_liq_in - liq_in, 0)

    def minted_liquidity_tokens(
        self,
        added_primary: int,
        added_secondary: int,
        total_primary: int,
        total_secondary: int,
        total_liquidity: int,
        fee_bps: int,
    ) -> int:
        return get_stableswap_minted_liquidity_tokens(
            added_primary,
            added_secondary,
            total_primary,
            total_secondary,
            total_liquidity,
            fee_bps,
            self.amp,
            self.precision,
            ann_multiplier=self.config.ann_multiplier,
            max_iterations=self.config.max_iterations,
        )

    def add_liquidity_bonus_pct(
        self,
        added_primary: int,
        added_secondary: int,
        total_primary: int,
        total_secondary: int,
        fee_bps: int,
    ) -> float:
        return get_add_liquidity_bonus_pct(
            added_primary,
            added_secondary,
            total_primary,
            total_secondary,
            fee_bps,
            self.amp,
            self.precision,
            ann_multiplier=self.config.ann_multiplier,
            max_iterations=self.config.max_iterations,
        )
