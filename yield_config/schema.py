"""
Configuration schema (``yield_config.schema``).

Frozen dataclass describing one deployment's runtime settings.  Parsed
from YAML by ``yield_config.loader``; never constructed from environment
variables or ad-hoc dicts elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class YieldConfig:
    """Runtime settings for one yield kernel deployment."""

    database_url: str
    initial_oracle: str
    log_level: str = "INFO"
    echo_sql: bool = False
    checksum: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.database_url, str) or not self.database_url.strip():
            raise ValueError("database_url must be a non-empty string")
        if not isinstance(self.initial_oracle, str) or not self.initial_oracle.strip():
            raise ValueError("initial_oracle must be a non-empty string")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not isinstance(self.echo_sql, bool):
            raise ValueError(f"echo_sql must be a boolean, got {self.echo_sql!r}")
