"""
Centralized configuration for update-op-creds.

All configuration is loaded from environment variables with sensible defaults.
The op CLI's own session variables (OP_SESSION_*, OP_SERVICE_ACCOUNT_TOKEN)
are not read here; they reach op through the inherited environment.

Usage:
    from opcreds.config import get_config
    cfg = get_config()
    print(cfg.op_path)       # "op" or $OP_CREDS_OP_PATH
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """Top-level configuration."""

    op_path: str = "op"
    account: str = ""  # empty = op's default account
    log_level: str = "WARNING"

    @property
    def log_level_number(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    return Config(
        op_path=os.environ.get("OP_CREDS_OP_PATH", "op"),
        account=os.environ.get("OP_CREDS_ACCOUNT", ""),
        log_level=os.environ.get("OP_CREDS_LOG_LEVEL", "WARNING"),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
