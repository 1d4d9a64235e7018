"""Command line preview of pool trades.

Examples:
  amm-engine swap --state pool.json --asset 0 --amount 1000000
  amm-engine swap --state pool.json --asset 31566704 --amount 500000 --reversed
  amm-engine add-liquidity --state pool.json --primary-amount 10000 --secondary-amount 20000
  amm-engine zap --state pool.json --asset 0 --amount 1000000 --slippage-bps 50

The state file holds the decoded global state of the pool contract
(A, B, L, ASSET_A, ASSET_B, FEE_BPS, ...). The effect is printed as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import structlog

from amm_engine.config import EngineConfig
from amm_engine.effects import LiquidityAddition, Swap, Zap
from amm_engine.errors import AmmEngineError
from amm_engine.models import Asset, PoolInternalState, PoolSnapshot

logger = structlog.get_logger()

LOG_LEVELS = ("debug", "info", "warning", "error")


def configure_logging(level: str) -> None:
    """Configure structlog to write human-readable events to stderr."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def load_pool(path: Path, primary_decimals: int, secondary_decimals: int) -> PoolSnapshot:
    """Read a pool state JSON file into a snapshot."""
    with path.open() as f:
        data = json.load(f)
    state = PoolInternalState.model_validate(data)
    return state.to_snapshot(primary_decimals, secondary_decimals)


def resolve_asset(pool: PoolSnapshot, asset_id: int) -> Asset:
    """Pool asset with the given id; unknown ids are rejected by the builders."""
    for asset in (pool.primary_asset, pool.secondary_asset):
        if asset.index == asset_id:
            return asset
    return Asset(index=asset_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amm-engine",
        description="Preview swaps and liquidity additions against a pool snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=os.environ.get("AMM_ENGINE_LOG_LEVEL", "warning").lower(),
        help="Log level (default: $AMM_ENGINE_LOG_LEVEL or warning)",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--state",
        type=Path,
        required=True,
        help="JSON file with the pool contract's global state",
    )
    common.add_argument("--primary-decimals", type=int, default=6)
    common.add_argument("--secondary-decimals", type=int, default=6)
    common.add_argument(
        "--slippage-bps",
        type=int,
        default=0,
        help="Slippage tolerance in basis points (default: 0)",
    )
    common.add_argument(
        "--now",
        type=int,
        default=None,
        help="UNIX time in milliseconds for the stableswap amplifier (default: now)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    swap = subparsers.add_parser("swap", parents=[common], help="Preview a swap")
    swap.add_argument("--asset", type=int, required=True, help="Id of the deposited asset")
    swap.add_argument("--amount", type=int, required=True)
    swap.add_argument(
        "--reversed",
        action="store_true",
        help="Treat --amount as the exact amount to receive",
    )

    add = subparsers.add_parser(
        "add-liquidity", parents=[common], help="Preview a liquidity addition"
    )
    add.add_argument("--primary-amount", type=int, required=True)
    add.add_argument("--secondary-amount", type=int, required=True)

    zap = subparsers.add_parser("zap", parents=[common], help="Preview a single-asset zap")
    zap.add_argument("--asset", type=int, required=True, help="Id of the zapped asset")
    zap.add_argument("--amount", type=int, required=True)

    return parser


def run_command(args: argparse.Namespace, config: EngineConfig) -> dict[str, Any]:
    """Build the requested effect and return it as a plain dict."""
    pool = load_pool(args.state, args.primary_decimals, args.secondary_decimals)

    if args.command == "swap":
        effect: Any = Swap(
            pool,
            resolve_asset(pool, args.asset),
            args.amount,
            args.slippage_bps,
            args.reversed,
            now=args.now,
            config=config,
        ).effect
    elif args.command == "add-liquidity":
        effect = LiquidityAddition(
            pool,
            args.primary_amount,
            args.secondary_amount,
            args.slippage_bps,
            now=args.now,
            config=config,
        ).effect
    else:
        effect = Zap(
            pool,
            resolve_asset(pool, args.asset),
            args.amount,
            args.slippage_bps,
            config=config,
        ).effect
    return asdict(effect)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the amm-engine console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = EngineConfig.from_env()
        result = run_command(args, config)
    except (AmmEngineError, ValueError, OSError) as e:
        # pydantic and JSON decoding errors are ValueErrors
        logger.error("preview_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
