"""
i2kn_core.config
----------------
Runtime configuration for a node. Values come from an explicit dict first,
then I2KN_* environment variables, then defaults.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import os

STORAGE_PROVIDERS = ("fs", "memory")
NONCE_STRATEGIES = ("random", "static")
KEY_DERIVATIONS = ("hkdf", "split")


@dataclass(frozen=True)
class NodeConfig:
    home: Path
    storage_provider: str = "fs"
    nonce_strategy: str = "random"   # random | static (legacy, IV reuse)
    key_derivation: str = "hkdf"     # hkdf | split (legacy raw slicing)
    # None leaves logger levels alone; a value is applied to every i2kn.* logger
    log_level: Optional[str] = None

    def __post_init__(self):
        if self.storage_provider not in STORAGE_PROVIDERS:
            raise ValueError(f"Unknown storage provider: {self.storage_provider}")
        if self.nonce_strategy not in NONCE_STRATEGIES:
            raise ValueError(f"Unknown nonce strategy: {self.nonce_strategy}")
        if self.key_derivation not in KEY_DERIVATIONS:
            raise ValueError(f"Unknown key derivation: {self.key_derivation}")

    @classmethod
    def from_env(cls, config: Optional[Dict[str, Any]] = None) -> "NodeConfig":
        config = config or {}
        home = config.get("home") or os.getenv("I2KN_HOME") or Path.home()
        return cls(
            home=Path(home).expanduser(),
            storage_provider=(config.get("storage_provider") or os.getenv("I2KN_STORAGE_PROVIDER", "fs")).lower(),
            nonce_strategy=(config.get("nonce_strategy") or os.getenv("I2KN_NONCE_STRATEGY", "random")).lower(),
            key_derivation=(config.get("key_derivation") or os.getenv("I2KN_KEY_DERIVATION", "hkdf")).lower(),
            log_level=_upper(config.get("log_level") or os.getenv("I2KN_LOG_LEVEL")),
        )


def _upper(value: Optional[str]) -> Optional[str]:
    return value.upper() if value else None
