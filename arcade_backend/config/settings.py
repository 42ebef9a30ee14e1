"""
Runtime settings loaded from the environment (.env supported).
"""
import os
import re
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE)

_PRIVATE_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def get_int_env(key: str, default: int, min_value: Optional[int] = None) -> int:
    """Get an integer from the environment, falling back to default on garbage."""
    try:
        value = int(os.getenv(key, str(default)))
    except ValueError:
        value = default
    if min_value is not None:
        value = max(min_value, value)
    return value


def normalize_private_key(raw: Optional[str]) -> Optional[str]:
    """
    Trim whitespace, accept an optional 0x prefix and require 64 hex chars.

    Returns the key with a 0x prefix, or None if it is missing or malformed.
    """
    if not raw:
        return None
    key = raw.strip()
    if key.startswith("0x"):
        key = key[2:]
    if not _PRIVATE_KEY_RE.match(key):
        return None
    return f"0x{key}"


class Settings:
    """Process-wide configuration. Read once at import time."""

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./arcade.db")
    SCORE_STORE_BACKEND: str = os.getenv("SCORE_STORE_BACKEND", "memory").lower()

    # Ledger
    LEDGER_RPC_URL: str = os.getenv("LEDGER_RPC_URL", "https://sepolia.base.org")
    LEDGER_CHAIN_ID: int = get_int_env("LEDGER_CHAIN_ID", 84532)
    TOURNAMENT_CONTRACT_ADDRESS: str = os.getenv(
        "TOURNAMENT_CONTRACT_ADDRESS", "0xD7ACd2a9FD159E69Bb102A1ca21C9a3e3A5F771B"
    )
    TOURNAMENT_MANAGER_PRIVATE_KEY: Optional[str] = os.getenv("TOURNAMENT_MANAGER_PRIVATE_KEY")
    TX_CONFIRMATION_TIMEOUT: int = get_int_env("TX_CONFIRMATION_TIMEOUT", 120, min_value=1)
    TX_GAS_LIMIT: int = get_int_env("TX_GAS_LIMIT", 500000, min_value=21000)

    # Tournament lifecycle
    TOURNAMENT_DURATION_SECONDS: int = 24 * 60 * 60
    TOURNAMENT_ENTRY_FEE_ETHER: Decimal = Decimal("0.001")

    # Scheduling
    CRON_SECRET: Optional[str] = os.getenv("CRON_SECRET")
    RECONCILE_INTERVAL_SECONDS: int = get_int_env("RECONCILE_INTERVAL_SECONDS", 3600, min_value=1)

    # Ingestion
    SCORE_RATE_LIMIT: str = os.getenv("SCORE_RATE_LIMIT", "60/minute")

    @classmethod
    def allowed_origins(cls) -> List[str]:
        origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
        extra = os.getenv("ALLOWED_ORIGINS", "").split(",")
        origins.extend(o.strip() for o in extra if o.strip())
        return origins

    @classmethod
    def manager_private_key(cls) -> Optional[str]:
        return normalize_private_key(cls.TOURNAMENT_MANAGER_PRIVATE_KEY)

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"


settings = Settings()
