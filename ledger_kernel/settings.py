"""
Ledger settings (``ledger_kernel.settings``).

Responsibility
--------------
Loads runtime settings for the ledger (database connection, pool sizing,
log level, balance tolerance) from a YAML file and the process
environment, and wires them into the engine and logging layers.

Precedence: environment variables > YAML file > dataclass defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys in the ``ledger`` mapping  -> ``ValueError``.
* Unknown log level name  -> ``ValueError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy.engine import Engine

ENV_DATABASE_URL = "LEDGER_DATABASE_URL"
ENV_LOG_LEVEL = "LEDGER_LOG_LEVEL"

# Tolerance used by the approval gate
DEFAULT_BALANCE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings for one ledger process."""

    database_url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    log_level: str = "INFO"
    balance_tolerance: Decimal = DEFAULT_BALANCE_TOLERANCE

    def __post_init__(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        if self.balance_tolerance < 0:
            raise ValueError("balance_tolerance must be non-negative")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict (empty if blank)."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_settings(data: dict[str, Any]) -> LedgerSettings:
    """
    Build ``LedgerSettings`` from the ``ledger`` mapping of a settings file.

    Raises:
        ValueError: if the mapping contains keys LedgerSettings does not know.
    """
    section = data.get("ledger", data)
    known = {f.name for f in fields(LedgerSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown ledger settings: {', '.join(unknown)}")

    values = dict(section)
    if "balance_tolerance" in values:
        values["balance_tolerance"] = Decimal(str(values["balance_tolerance"]))
    return LedgerSettings(**values)


def apply_environment(
    settings: LedgerSettings,
    environ: dict[str, str] | None = None,
) -> LedgerSettings:
    """Override settings from ``LEDGER_*`` environment variables."""
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    if env.get(ENV_DATABASE_URL):
        overrides["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_LOG_LEVEL):
        overrides["log_level"] = env[ENV_LOG_LEVEL]
    return replace(settings, **overrides) if overrides else settings


def load_settings(
    path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> LedgerSettings:
    """Load settings from an optional YAML file, then apply the environment."""
    settings = parse_settings(load_yaml_file(Path(path))) if path else LedgerSettings()
    return apply_environment(settings, environ)


def init_engine_from_settings(settings: LedgerSettings) -> Engine:
    """Configure logging and initialize the engine from ``settings``."""
    from ledger_kernel.db.engine import init_engine_from_url
    from ledger_kernel.logging_config import configure_logging

    configure_logging(level=settings.log_level_number)
    return init_engine_from_url(
        settings.database_url,
        echo=settings.echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
    )
