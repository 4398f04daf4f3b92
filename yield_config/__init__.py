"""
yield_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain settings at
    runtime; ``build_distributor()`` turns those settings into a ready
    ``YieldDistributor``.

Architecture position:
    Configuration sits above ``yield_kernel``.  The kernel never imports
    from ``yield_config``.

Audit relevance:
    Every ``get_active_config()`` call logs ``config_loaded`` with the
    source path and the checksum of the parsed settings.
"""

from __future__ import annotations

import os
from pathlib import Path

from yield_config.loader import load_config
from yield_config.schema import YieldConfig
from yield_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    session_scope,
)
from yield_kernel.db.immutability import register_immutability_listeners
from yield_kernel.domain.clock import Clock
from yield_kernel.logging_config import configure_logging, get_logger
from yield_kernel.services.sequence_service import SequenceService
from yield_kernel.services.settlement import PaymentSettlement
from yield_kernel.services.yield_distributor import YieldDistributor

_logger = get_logger("config")

CONFIG_ENV_VAR = "YIELD_KERNEL_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> YieldConfig:
    """
    The ONLY public configuration entrypoint.

    Resolution order: explicit ``path``, then the file named by the
    ``YIELD_KERNEL_CONFIG`` environment variable, then the packaged
    ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value is invalid.
    """
    resolved = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    config = load_config(resolved)
    _logger.info(
        "config_loaded",
        extra={"path": str(resolved), "checksum": config.checksum},
    )
    return config


def build_distributor(
    config: YieldConfig | None = None,
    clock: Clock | None = None,
    settlement: PaymentSettlement | None = None,
) -> YieldDistributor:
    """
    Initialize the engine and schema for ``config`` and return a facade.

    Seeds the revenue nonce counter and, on first start, the oracle.
    Safe to call against an existing database: tables, counters and
    the oracle are only created when missing.
    """
    config = config or get_active_config()

    configure_logging(level=config.log_level)
    engine = init_engine_from_url(config.database_url, echo=config.echo_sql)
    create_tables(engine)
    register_immutability_listeners()

    factory = get_session_factory()
    with session_scope(factory) as session:
        SequenceService(session).initialize_sequences()

    distributor = YieldDistributor(factory, clock=clock, settlement=settlement)
    result = distributor.initialize_oracle(config.initial_oracle)
    if not result.ok:
        raise ValueError(f"Cannot initialize oracle: {result.message}")
    return distributor


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "YieldConfig",
    "build_distributor",
    "get_active_config",
    "load_config",
]
