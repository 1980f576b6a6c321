"""Deployment configuration: YAML file plus env-var interpolation, validated into frozen dataclasses.

Only the wiring is configurable (addresses, token metadata, price-feed
decimals and starting price). Protocol constants such as the health-factor
thresholds and the liquidation bonus are fixed in `core.cdp.math`.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default_config.yaml"


class ConfigError(ValueError):
    """Raised when a configuration file is malformed or out of range."""


# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineConfig:
    address: str = "dsc-engine"


@dataclass(frozen=True)
class TokenConfig:
    name: str = ""
    symbol: str = ""
    address: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class PriceFeedConfig:
    address: str = "eth-usd-feed"
    decimals: int = 8
    initial_price: int = 2000 * 10**8


@dataclass(frozen=True)
class DeploymentConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    collateral: TokenConfig = field(
        default_factory=lambda: TokenConfig(name="Wrapped Ether", symbol="WETH", address="weth")
    )
    debt_token: TokenConfig = field(
        default_factory=lambda: TokenConfig(name="DecentralizedStableCoin", symbol="DSC", address="dsc")
    )
    price_feed: PriceFeedConfig = field(default_factory=PriceFeedConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML -> dataclass builders
# ---------------------------------------------------------------------------


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"section {name!r} must be a mapping")
    return value


def _as_int(raw: dict[str, Any], key: str, default: int, *, section: str) -> int:
    value = raw.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}") from exc


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(address=str(raw.get("address", EngineConfig.address)))


def _build_token(raw: dict[str, Any], default: TokenConfig, *, section: str) -> TokenConfig:
    decimals = _as_int(raw, "decimals", default.decimals, section=section)
    if decimals != 18:
        raise ConfigError(f"{section}.decimals must be 18, got {decimals}")
    token = TokenConfig(
        name=str(raw.get("name", default.name)),
        symbol=str(raw.get("symbol", default.symbol)),
        address=str(raw.get("address", default.address)),
        decimals=decimals,
    )
    if not token.address:
        raise ConfigError(f"{section}.address must be non-empty")
    return token


def _build_price_feed(raw: dict[str, Any]) -> PriceFeedConfig:
    decimals = _as_int(raw, "decimals", PriceFeedConfig.decimals, section="price_feed")
    initial_price = _as_int(raw, "initial_price", PriceFeedConfig.initial_price, section="price_feed")
    if not 0 <= decimals <= 18:
        raise ConfigError(f"price_feed.decimals must be in [0, 18], got {decimals}")
    if initial_price <= 0:
        raise ConfigError(f"price_feed.initial_price must be positive, got {initial_price}")
    return PriceFeedConfig(
        address=str(raw.get("address", PriceFeedConfig.address)),
        decimals=decimals,
        initial_price=initial_price,
    )


def build_config(raw: dict[str, Any]) -> DeploymentConfig:
    """Build a DeploymentConfig from an already-parsed mapping."""
    if not isinstance(raw, dict):
        raise ConfigError("configuration root must be a mapping")
    raw = _interpolate_env(raw)
    defaults = DeploymentConfig()
    config = DeploymentConfig(
        engine=_build_engine(_section(raw, "engine")),
        collateral=_build_token(_section(raw, "collateral"), defaults.collateral, section="collateral"),
        debt_token=_build_token(_section(raw, "debt_token"), defaults.debt_token, section="debt_token"),
        price_feed=_build_price_feed(_section(raw, "price_feed")),
    )
    addresses = [config.engine.address, config.collateral.address, config.debt_token.address, config.price_feed.address]
    if len(set(addresses)) != len(addresses):
        raise ConfigError(f"addresses must be distinct: {addresses}")
    return config


def load_config(path: str | Path | None = None) -> DeploymentConfig:
    """Load and validate configuration from YAML. Falls back to the packaged defaults."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.is_file():
        raise ConfigError(f"config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = build_config(raw)
    logger.info(
        "loaded config from %s: collateral=%s feed=%s decimals=%d",
        config_path,
        config.collateral.symbol,
        config.price_feed.address,
        config.price_feed.decimals,
    )
    return config
