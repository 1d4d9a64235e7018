"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest
import structlog

from amm_engine.config import EngineConfig
from amm_engine.constants import LEGACY_STABLESWAP_ANN_MULTIPLIER
from amm_engine.models import PoolSnapshot
from tests.helpers import make_constant_product_pool, make_stableswap_pool


@pytest.fixture
def cp_pool() -> PoolSnapshot:
    """Balanced constant product pool with a 0.3% fee."""
    return make_constant_product_pool(100_000, 100_000, fee_bps=30)


@pytest.fixture
def stable_pool() -> PoolSnapshot:
    """Balanced stableswap pool, A = 100, no fee."""
    return make_stableswap_pool(1_000_000, 1_000_000, amplifier=100)


@pytest.fixture
def legacy_config() -> EngineConfig:
    """Config for the legacy stableswap contract (Ann = A * 2)."""
    return EngineConfig(ann_multiplier=LEGACY_STABLESWAP_ANN_MULTIPLIER)


@pytest.fixture
def write_state(tmp_path: Path):
    """Write a pool state mapping to a JSON file and return its path."""

    def _write(state: dict) -> Path:
        path = tmp_path / "state.json"
        path.write_text(json.dumps(state))
        return path

    return _write


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo structlog configuration done by a test (e.g. through the CLI)."""
    yield
    structlog.reset_defaults()
