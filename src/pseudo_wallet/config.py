"""
Runtime Configuration

Reads sandbox settings from the environment (a local ``.env`` file is loaded
first). Every value has a default so an empty environment yields a working,
in-memory sandbox.

Environment variables:
    PSEUDO_STORAGE_PATH:        JSON file used to persist sandbox keypairs.
                                Unset keeps keypairs in memory only.
    PSEUDO_SANDBOX_DEFAULT:     Initial state of the "use sandbox" toggle on
                                the prompt consent surface (true/false).
    PSEUDO_LOG_LEVEL:           Logging level for the ``pseudo_wallet`` logger.
    PSEUDO_DISCOVERY_DELAYS_MS: Comma separated provider re-check delays.
    PSEUDO_ETH_CHAIN_ID:        Hex chain id reported with the Ethereum
                                ``connect`` event.
"""

import os
from typing import Dict, Mapping, Optional, Tuple

import dotenv
from pydantic import BaseModel, Field

from .engine.exceptions import ConfigurationError

dotenv.load_dotenv()


# Aggressive re-checks first to beat scripts that grab the provider early,
# then slower ones for late injection.
DEFAULT_DISCOVERY_DELAYS_MS: Tuple[int, ...] = (0, 10, 25, 50, 100, 150, 200, 300, 500, 1000, 2000)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    """Sandbox runtime settings."""
    storage_path: Optional[str] = Field(None, description="Keypair JSON file; None keeps keys in memory")
    sandbox_default: bool = Field(False, description="Initial 'use sandbox' toggle value")
    log_level: str = Field("INFO", description="Logging level name")
    discovery_delays_ms: Tuple[int, ...] = Field(DEFAULT_DISCOVERY_DELAYS_MS, description="Provider discovery schedule")
    eth_chain_id: str = Field("0x1", description="Chain id announced on sandbox Ethereum connect")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_delays(name: str, raw: str) -> Tuple[int, ...]:
    try:
        delays = tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a comma separated list of integers, got {raw!r}")
    if any(d < 0 for d in delays):
        raise ConfigurationError(f"{name} delays must be non-negative")
    return delays


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build ``Settings`` from environment variables.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        Populated ``Settings``.

    Raises:
        ConfigurationError: If a variable is set to an invalid value.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, object] = {}

    if env.get("PSEUDO_STORAGE_PATH"):
        values["storage_path"] = env["PSEUDO_STORAGE_PATH"]

    if "PSEUDO_SANDBOX_DEFAULT" in env:
        values["sandbox_default"] = _parse_bool("PSEUDO_SANDBOX_DEFAULT", env["PSEUDO_SANDBOX_DEFAULT"])

    if env.get("PSEUDO_LOG_LEVEL"):
        level = env["PSEUDO_LOG_LEVEL"].strip().upper()
        if level not in _LOG_LEVELS:
            raise ConfigurationError(f"PSEUDO_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {level!r}")
        values["log_level"] = level

    if env.get("PSEUDO_DISCOVERY_DELAYS_MS"):
        values["discovery_delays_ms"] = _parse_delays("PSEUDO_DISCOVERY_DELAYS_MS", env["PSEUDO_DISCOVERY_DELAYS_MS"])

    if env.get("PSEUDO_ETH_CHAIN_ID"):
        chain_id = env["PSEUDO_ETH_CHAIN_ID"].strip()
        try:
            chain_id = hex(int(chain_id, 16) if chain_id.lower().startswith("0x") else int(chain_id))
        except ValueError:
            raise ConfigurationError(f"PSEUDO_ETH_CHAIN_ID must be a chain id, got {chain_id!r}")
        values["eth_chain_id"] = chain_id

    return Settings(**values)
