"""Tests for stableswap pool math.

Vectors use Ann = 200: amplifier 50 with the current contract form
(Ann = A * 4), or amplifier 100 with the legacy form (Ann = A * 2).
"""

import math

import pytest

from amm_engine.calculators import (
    StableswapCalculator,
    SwapCalculator,
    add_liquidity_fees,
    calculate_invariant,
    get_add_liquidity_bonus_pct,
    get_new_balance,
    get_stableswap_minted_liquidity_tokens,
)
from amm_engine.config import EngineConfig
from amm_engine.errors import (
    ConvergenceError,
    InsufficientLiquidityError,
    LiquidityExceededError,
    ValidationError,
)
from amm_engine.models import AmplifierParams


@pytest.fixture
def calc() -> StableswapCalculator:
    """Ann = 50 * 4 = 200."""
    return StableswapCalculator(AmplifierParams.constant(50))


class TestCalculateInvariant:
    """Tests for the Newton-Raphson invariant."""

    def test_known_vector(self):
        assert calculate_invariant(2_000, 1_500, 50, 1) == 3_499

    def test_legacy_form_matches(self):
        """A = 100 with Ann = 2A gives the same invariant as A = 50 with Ann = 4A."""
        assert calculate_invariant(2_000, 1_500, 100, 1, ann_multiplier=2) == 3_499

    def test_balanced_pool_equals_sum(self):
        assert calculate_invariant(100_000, 100_000, 100, 1) == 200_000

    def test_empty_pool(self):
        assert calculate_invariant(0, 0, 100, 1) == 0

    def test_between_geometric_and_arithmetic_mean(self):
        """2 * sqrt(a * b) <= D <= a + b."""
        for liq_a, liq_b in ((1_000, 9_000), (10**12, 3 * 10**12), (50_000, 60_000)):
            d = calculate_invariant(liq_a, liq_b, 20, 1)
            assert 2 * math.isqrt(liq_a * liq_b) - 2 <= d <= liq_a + liq_b

    def test_one_sided_pool_raises(self):
        with pytest.raises(ConvergenceError):
            calculate_invariant(0, 100, 100, 1)

    def test_iteration_bound_raises(self):
        """An extreme ratio cannot converge in three iterations."""
        with pytest.raises(ConvergenceError, match="converge"):
            calculate_invariant(1, 10**12, 1, 1, max_iterations=3)


class TestGetNewBalance:
    def test_recovers_balance(self):
        """Solving for the other balance of the same pool gives it back (within 1)."""
        d = calculate_invariant(2_000, 1_500, 50, 1)
        assert abs(get_new_balance(2_000, 50, d, 1) - 1_500) <= 1


class TestSwap:
    """Tests for swaps in both directions."""

    def test_gross_received_vector(self, calc):
        assert calc.swap_gross_received(2_000, 1_500, 1_000) == 984

    def test_amount_deposited_vectors(self, calc):
        assert calc.swap_amount_deposited(2_000, 1_500, 1_000) == 1_017
        assert calc.swap_amount_deposited(2_000, 1_500, 984) == 1_000

    def test_legacy_config_vectors(self, legacy_config):
        legacy = StableswapCalculator(AmplifierParams.constant(100), config=legacy_config)
        assert legacy.swap_gross_received(2_000, 1_500, 1_000) == 984
        assert legacy.swap_amount_deposited(2_000, 1_500, 1_000) == 1_017

    def test_near_one_to_one_when_balanced(self):
        calc = StableswapCalculator(AmplifierParams.constant(100))
        received = calc.swap_gross_received(10**9, 10**9, 10**6)
        assert 999_000 < received <= 10**6

    def test_whole_reserve_raises(self, calc):
        with pytest.raises(LiquidityExceededError):
            calc.swap_amount_deposited(2_000, 1_500, 1_500)

    def test_satisfies_protocol(self, calc):
        assert isinstance(calc, SwapCalculator)


class TestAmplifier:
    """Tests for the amplifier ramp."""

    @pytest.fixture
    def ramp(self) -> AmplifierParams:
        return AmplifierParams(
            initial_a=100, initial_a_time=0, future_a=200, future_a_time=1_000
        )

    def test_interpolates(self, ramp):
        calc = StableswapCalculator(ramp, now=500)
        assert calc.amp == 150
        assert calc.amplifier(0) == 100
        assert calc.amplifier(250) == 125

    def test_rounds_half_up(self, ramp):
        """100.5 rounds to 101."""
        assert StableswapCalculator(ramp, now=5).amp == 101

    def test_clamped_outside_ramp(self, ramp):
        calc = StableswapCalculator(ramp, now=0)
        assert calc.amplifier(-1_000) == 100
        assert calc.amplifier(5_000) == 200

    def test_monotonic_ramp_up(self, ramp):
        calc = StableswapCalculator(ramp, now=0)
        values = [calc.amplifier(t) for t in range(-100, 1_200, 25)]
        assert values == sorted(values)

    def test_ramp_down(self):
        params = AmplifierParams(
            initial_a=200, initial_a_time=0, future_a=100, future_a_time=1_000
        )
        calc = StableswapCalculator(params, now=500)
        assert calc.amp == 150
        assert calc.amplifier(2_000) == 100

    def test_constant_amplifier(self):
        assert StableswapCalculator(AmplifierParams.constant(80)).amp == 80

    def test_too_low_for_precision_raises(self):
        with pytest.raises(ValidationError):
            StableswapCalculator(AmplifierParams.constant(1, precision=100))


class TestPrice:
    """Tests for the simulated-swap price estimate."""

    def test_balanced_pool_near_one(self):
        calc = StableswapCalculator(AmplifierParams.constant(100))
        price = calc.price(1.0, 1.0, 10**6)
        assert price == pytest.approx(1.0, rel=1e-2)

    def test_empty_side_is_zero(self, calc):
        assert calc.price(0.0, 1.0, 10**6) == 0.0

    def test_all_attempts_failing_is_nan(self):
        """Every probe fails to converge, so the price is unknown."""
        calc = StableswapCalculator(
            AmplifierParams.constant(1), config=EngineConfig(max_iterations=3)
        )
        assert math.isnan(calc.price(1e12, 1e4, 1))

    def test_probe_too_small_is_nan(self, calc):
        """Reserves below 100 units leave no probe amount."""
        assert math.isnan(calc.price(50.0, 50.0, 1))


class TestAddLiquidityFees:
    """Tests for the balance-correction fee."""

    def test_balanced_deposit_pays_nothing(self):
        assert add_liquidity_fees(1_000, 1_000, 100_000, 100_000, 30, 100, 1) == (0, 0)

    def test_one_sided_deposit_charges_both_assets(self):
        fee_a, fee_b = add_liquidity_fees(50_000, 0, 10_000, 60_000, 30, 20, 1)
        assert fee_a > 0
        assert fee_b > 0

    def test_zero_fee(self):
        assert add_liquidity_fees(50_000, 0, 10_000, 60_000, 0, 20, 1) == (0, 0)


class TestMintedLiquidityTokens:
    """Tests for stableswap minting."""

    def test_first_deposit(self):
        minted = get_stableswap_minted_liquidity_tokens(10_000, 40_000, 0, 0, 0, 30, 100, 1)
        assert minted == 20_000

    def test_balanced_deposit_is_proportional(self):
        minted = get_stableswap_minted_liquidity_tokens(
            1_000, 1_000, 100_000, 100_000, 100_000, 30, 100, 1
        )
        assert minted == 1_000

    def test_one_sided_deposit_mints(self):
        minted = get_stableswap_minted_liquidity_tokens(
            50_000, 0, 10_000, 60_000, 24_494, 30, 20, 1
        )
        assert minted > 0

    def test_fee_exceeding_liquidity_raises(self):
        """The imbalance fee on the scarce asset exceeds its whole balance."""
        with pytest.raises(InsufficientLiquidityError, match="too low to cover"):
            get_stableswap_minted_liquidity_tokens(
                0, 10**9, 1_000, 100_000, 10_000, 1_000, 80, 1
            )

    def test_calculator_delegates(self):
        calc = StableswapCalculator(AmplifierParams.constant(100))
        assert calc.minted_liquidity_tokens(1_000, 1_000, 100_000, 100_000, 100_000, 30) == 1_000


class TestAddLiquidityBonus:
    """Tests for the bonus (positive) or penalty (negative) of a deposit."""

    def test_rebalancing_deposit_has_bonus(self):
        bonus = get_add_liquidity_bonus_pct(50_000, 0, 10_000, 60_000, 30, 20, 1)
        assert bonus > 0

    def test_unbalancing_deposit_has_penalty(self):
        bonus = get_add_liquidity_bonus_pct(0, 30_000, 50_000, 60_000, 30, 20, 1)
        assert bonus < 0

    def test_balanced_deposit_without_fee_is_neutral(self):
        bonus = get_add_liquidity_bonus_pct(1_000, 1_000, 100_000, 100_000, 0, 100, 1)
        assert bonus == pytest.approx(0.0, abs=1e-9)

    def test_empty_pool_or_deposit_is_zero(self):
        assert get_add_liquidity_bonus_pct(1_000, 1_000, 0, 0, 30, 100, 1) == 0.0
        assert get_add_liquidity_bonus_pct(0, 0, 1_000, 1_000, 30, 100, 1) == 0.0

    def test_fee_exceeding_liquidity_raises(self):
        with pytest.raises(InsufficientLiquidityError):
            get_add_liquidity_bonus_pct(0, 10**9, 1_000, 100_000, 1_000, 80, 1)
