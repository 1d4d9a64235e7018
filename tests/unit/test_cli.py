"""Tests for the amm-engine command line."""

import json

import pytest

from amm_engine.cli import main

POOL_STATE = {
    "A": 100_000,
    "B": 100_000,
    "L": 100_000,
    "ASSET_A": 0,
    "ASSET_B": 31566704,
    "FEE_BPS": 30,
}

STABLESWAP_STATE = {
    "A": 2_000,
    "B": 1_500,
    "L": 1_732,
    "ASSET_A": 31566704,
    "ASSET_B": 312769,
    "FEE_BPS": 0,
    "INITIAL_A": 50,
    "INITIAL_A_TIME": 0,
    "FUTURE_A": 50,
    "FUTURE_A_TIME": 0,
}


@pytest.fixture(autouse=True)
def default_env(monkeypatch):
    for name in (
        "AMM_ENGINE_MAX_ITERATIONS",
        "AMM_ENGINE_ANN_MULTIPLIER",
        "AMM_ENGINE_PRICE_RETRIES",
        "AMM_ENGINE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def run(capsys, *argv: str) -> tuple[int, dict | None, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    output = json.loads(captured.out) if code == 0 else None
    return code, output, captured.err


class TestSwapCommand:
    def test_exact_deposit(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, output, _ = run(
            capsys, "swap", "--state", str(path), "--asset", "0", "--amount", "1000",
            "--slippage-bps", "100",
        )
        assert code == 0
        assert output["amount_received"] == 987
        assert output["minimum_amount_received"] == 978
        assert output["fee"] == 3

    def test_exact_receive(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, output, _ = run(
            capsys, "swap", "--state", str(path), "--asset", "0", "--amount", "987", "--reversed"
        )
        assert code == 0
        assert output["amount_deposited"] == 1_000

    def test_stableswap_state(self, capsys, write_state):
        path = write_state(STABLESWAP_STATE)
        code, output, _ = run(
            capsys, "swap", "--state", str(path), "--asset", "31566704", "--amount", "1000"
        )
        assert code == 0
        assert output["amount_received"] == 984

    def test_unknown_asset_fails(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, _, err = run(capsys, "swap", "--state", str(path), "--asset", "9", "--amount", "1")
        assert code == 1
        assert "not in the pool" in err


class TestOtherCommands:
    def test_add_liquidity(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, output, _ = run(
            capsys, "add-liquidity", "--state", str(path),
            "--primary-amount", "10000", "--secondary-amount", "10000",
        )
        assert code == 0
        assert output["minted_liquidity_tokens"] == 10_000

    def test_zap(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, output, _ = run(
            capsys, "zap", "--state", str(path), "--asset", "0", "--amount", "10000"
        )
        assert code == 0
        assert output["plan"]["swap_deposited"] == 4_888
        assert output["swap"]["amount_deposited"] == 4_888
        assert output["liquidity_addition"]["minted_liquidity_tokens"] > 0


class TestErrors:
    def test_missing_file(self, capsys, tmp_path):
        code, _, err = run(
            capsys, "swap", "--state", str(tmp_path / "nope.json"), "--asset", "0",
            "--amount", "1",
        )
        assert code == 1
        assert "Error" in err

    def test_invalid_state(self, capsys, write_state):
        state = dict(POOL_STATE)
        del state["FEE_BPS"]
        path = write_state(state)
        code, _, err = run(capsys, "swap", "--state", str(path), "--asset", "0", "--amount", "1")
        assert code == 1
        assert "FEE_BPS" in err

    def test_missing_command_exits(self):
        with pytest.raises(SystemExit):
            main([])

    def test_debug_logging_goes_to_stderr(self, capsys, write_state):
        path = write_state(POOL_STATE)
        code, output, err = run(
            capsys, "--log-level", "debug", "add-liquidity", "--state", str(path),
            "--primary-amount", "10000", "--secondary-amount", "10000",
        )
        assert code == 0
        assert output["minted_liquidity_tokens"] == 10_000
        assert "liquidity_addition_previewed" in err
