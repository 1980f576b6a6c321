"""Smoke test for tools/cdp_scenario_demo.py."""

from __future__ import annotations

import importlib.util
from pathlib import Path

DEMO_PATH = Path(__file__).resolve().parents[1] / "tools" / "cdp_scenario_demo.py"


def _load_demo(monkeypatch):
    spec = importlib.util.spec_from_file_location("cdp_scenario_demo", DEMO_PATH)
    assert spec and spec.loader, f"could not load spec from {DEMO_PATH}"
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    # Leave the root logger to pytest
    monkeypatch.setattr(module, "configure_logging", lambda level: None)
    return module


def test_default_scenario(capsys, monkeypatch):
    demo = _load_demo(monkeypatch)
    assert demo.main([]) == 0
    out = capsys.readouterr().out
    assert "extra mint of 1 DSC: accepted=False error=HealthFactorBelowThreshold(3)" in out
    assert "seized 0.651852 WETH" in out
    assert "band=at_risk" in out
    assert "invariants: ok" in out


def test_price_that_keeps_position_safe_fails_liquidation(capsys, monkeypatch):
    demo = _load_demo(monkeypatch)
    assert demo.main(["--crash-price", "1500"]) == 1
    assert "FAIL (liquidate): HealthFactorAboveThreshold(3)" in capsys.readouterr().out
