"""Tests for parsing pool contract state."""

import pydantic
import pytest

from amm_engine.errors import ValidationError
from amm_engine.models import ConstantProduct, PoolInternalState, Stableswap

CONSTANT_PRODUCT_STATE = {
    "A": 100_000,
    "B": 200_000,
    "L": 141_421,
    "ASSET_A": 0,
    "ASSET_B": 31566704,
    "FEE_BPS": 30,
    "PACT_FEE_BPS": 10,
    "VERSION": 2,
}

STABLESWAP_STATE = {
    "A": 1_000_000,
    "B": 1_200_000,
    "L": 1_100_000,
    "ASSET_A": 31566704,
    "ASSET_B": 312769,
    "FEE_BPS": 5,
    "INITIAL_A": 8_000,
    "INITIAL_A_TIME": 1_700_000_000_000,
    "FUTURE_A": 10_000,
    "FUTURE_A_TIME": 1_700_086_400_000,
    "PRECISION": 100,
}


class TestConstantProductState:
    def test_parses_aliases(self):
        state = PoolInternalState.model_validate(CONSTANT_PRODUCT_STATE)
        assert state.total_primary == 100_000
        assert state.protocol_fee_bps == 10
        assert not state.is_stableswap

    def test_to_snapshot(self):
        pool = PoolInternalState.model_validate(CONSTANT_PRODUCT_STATE).to_snapshot(6, 8)
        assert isinstance(pool.pool_type, ConstantProduct)
        assert pool.primary_asset.index == 0
        assert pool.secondary_asset.decimals == 8
        assert pool.reserves.total_secondary == 200_000
        assert pool.reserves.total_liquidity == 141_421
        assert pool.fees.pool_fee_bps == 20

    def test_defaults(self):
        state = dict(CONSTANT_PRODUCT_STATE)
        del state["PACT_FEE_BPS"]
        parsed = PoolInternalState.model_validate(state)
        assert parsed.protocol_fee_bps == 0
        assert parsed.precision == 1

    def test_unknown_keys_ignored(self):
        state = {**CONSTANT_PRODUCT_STATE, "CONTRACT_NAME": "PACT AMM"}
        assert PoolInternalState.model_validate(state).total_primary == 100_000

    def test_field_names_accepted(self):
        state = PoolInternalState(
            total_primary=1,
            total_secondary=2,
            total_liquidity=1,
            primary_asset_id=0,
            secondary_asset_id=5,
            fee_bps=30,
        )
        assert state.secondary_asset_id == 5


class TestStableswapState:
    def test_to_snapshot(self):
        state = PoolInternalState.model_validate(STABLESWAP_STATE)
        assert state.is_stableswap
        pool = state.to_snapshot()
        assert isinstance(pool.pool_type, Stableswap)
        amplifier = pool.pool_type.amplifier
        assert amplifier.initial_a == 8_000
        assert amplifier.future_a_time == 1_700_086_400_000
        assert amplifier.precision == 100

    def test_incomplete_amplifier_raises(self):
        state = dict(STABLESWAP_STATE)
        del state["FUTURE_A"]
        with pytest.raises(pydantic.ValidationError, match="FUTURE_A"):
            PoolInternalState.model_validate(state)

    def test_field_names_build_stableswap(self):
        state = PoolInternalState(
            total_primary=10,
            total_secondary=10,
            total_liquidity=10,
            primary_asset_id=1,
            secondary_asset_id=2,
            fee_bps=5,
            initial_a=100,
            initial_a_time=0,
            future_a=100,
            future_a_time=0,
        )
        assert isinstance(state.pool_type(), Stableswap)

    def test_incomplete_amplifier_by_field_name_raises(self):
        with pytest.raises(pydantic.ValidationError, match="INITIAL_A_TIME"):
            PoolInternalState(
                total_primary=10,
                total_secondary=10,
                total_liquidity=10,
                primary_asset_id=1,
                secondary_asset_id=2,
                fee_bps=5,
                initial_a=100,
            )


class TestInvalidState:
    def test_negative_reserve(self):
        with pytest.raises(pydantic.ValidationError):
            PoolInternalState.model_validate({**CONSTANT_PRODUCT_STATE, "A": -1})

    def test_missing_key(self):
        state = dict(CONSTANT_PRODUCT_STATE)
        del state["FEE_BPS"]
        with pytest.raises(pydantic.ValidationError):
            PoolInternalState.model_validate(state)

    def test_protocol_fee_above_trade_fee(self):
        """Each field is valid alone, the combination is rejected by the snapshot."""
        state = PoolInternalState.model_validate({**CONSTANT_PRODUCT_STATE, "PACT_FEE_BPS": 50})
        with pytest.raises(ValidationError):
            state.to_snapshot()
