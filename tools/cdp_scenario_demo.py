#!/usr/bin/env python3
"""Walk one position through deposit+mint, a price drop and a liquidation."""

from __future__ import annotations

import argparse

from dsc_engine.config import load_config
from dsc_engine.core.cdp import DSCEngine, PRECISION
from dsc_engine.integration import deploy
from dsc_engine.logging_setup import configure_logging

USER = "alice"
LIQUIDATOR = "liquidator"


def _show(engine: DSCEngine, account: str, label: str) -> None:
    collateral, debt = engine.get_position(account)
    print(
        f"[cdp-demo] {label}: collateral={collateral / PRECISION:.6f} "
        f"debt={debt / PRECISION:.2f} value_usd={engine.collateral_value_usd(account)} "
        f"health={engine.health_factor(account)} band={engine.position_band(account).value}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cdp-scenario-demo", description=__doc__)
    parser.add_argument("--config", default=None, help="Path to deployment YAML (default: packaged config)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--crash-price", type=int, default=1350, help="Collateral price after the drop, whole USD")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config = load_config(args.config)
    system = deploy(config)
    engine, weth, dsc, feed = system.engine, system.collateral, system.debt_token, system.price_feed

    collateral = 2 * PRECISION
    debt = 2000 * PRECISION
    weth.mint_to(USER, collateral)
    weth.approve(engine.address, collateral, caller=USER)

    result = engine.deposit_and_mint(USER, weth.address, collateral, debt)
    if not result.accepted:
        print(f"[cdp-demo] FAIL (deposit_and_mint): {result.error}")
        return 1
    _show(engine, USER, "after deposit_and_mint")

    result = engine.mint_debt(USER, PRECISION)
    print(f"[cdp-demo] extra mint of 1 DSC: accepted={result.accepted} error={result.error}")

    feed.update_price(args.crash_price * 10 ** feed.decimals())
    _show(engine, USER, f"after price drop to {args.crash_price}")

    # The liquidator buys its debt tokens by opening an over-collateralized position of its own.
    cover = 800 * PRECISION
    weth.mint_to(LIQUIDATOR, 20 * PRECISION)
    weth.approve(engine.address, 20 * PRECISION, caller=LIQUIDATOR)
    result = engine.deposit_and_mint(LIQUIDATOR, weth.address, 20 * PRECISION, cover)
    if not result.accepted:
        print(f"[cdp-demo] FAIL (liquidator funding): {result.error}")
        return 1
    dsc.approve(engine.address, cover, caller=LIQUIDATOR)

    weth_before = weth.balance_of(LIQUIDATOR)
    result = engine.liquidate(LIQUIDATOR, weth.address, USER, cover)
    if not result.accepted:
        print(f"[cdp-demo] FAIL (liquidate): {result.error}")
        return 1
    seized = weth.balance_of(LIQUIDATOR) - weth_before
    print(f"[cdp-demo] liquidator repaid {cover / PRECISION:.2f} DSC, seized {seized / PRECISION:.6f} WETH")
    _show(engine, USER, "after liquidation")

    violations = engine.check_invariants()
    print(f"[cdp-demo] invariants: {'ok' if not violations else ', '.join(violations)}")
    return 0 if not violations else 1


if __name__ == "__main__":
    raise SystemExit(main())
