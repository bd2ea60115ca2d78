"""
Configuration module for the Aori arbitrage bot.
Loads settings from environment variables with validation.
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from .constants import DEFAULT_SEAT_ID, MARKET_FEED_URL, REQUEST_URL
from .exceptions import ConfigError

# Load .env file if present
load_dotenv()


@dataclass
class WalletConfig:
    """Wallet and blockchain configuration."""
    private_key: str
    wallet_address: str
    node_url: str  # Used to resolve the chain id


@dataclass
class AoriConfig:
    """Aori exchange configuration."""
    api_key: str
    request_url: str = REQUEST_URL
    feed_url: str = MARKET_FEED_URL
    seat_id: str = DEFAULT_SEAT_ID


@dataclass
class StrategyConfig:
    """Strategy behaviour."""
    prune_inactive: bool  # Drop cancelled/taken orders from the ledger
    simulation_mode: bool  # Detect but don't send takes


@dataclass
class LogConfig:
    """Logging configuration."""
    log_level: str
    json_logging: bool


@dataclass
class Config:
    """Main configuration container."""
    wallet: WalletConfig
    aori: AoriConfig
    strategy: StrategyConfig
    logging: LogConfig


def get_env(key: str, default: Optional[str] = None, required: bool = True) -> str:
    """Get environment variable with validation."""
    value = os.getenv(key, default)
    if required and not value:
        raise ConfigError(f"Required environment variable {key} is not set")
    return value or ""


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes")


def load_config() -> Config:
    """Load and validate configuration from environment."""
    return Config(
        wallet=WalletConfig(
            private_key=get_env("PRIVATE_KEY"),
            wallet_address=get_env("WALLET_ADDRESS"),
            node_url=get_env("NODE_URL"),
        ),
        aori=AoriConfig(
            api_key=get_env("AORI_API_KEY"),
            request_url=get_env("AORI_REQUEST_URL", REQUEST_URL),
            feed_url=get_env("AORI_FEED_URL", MARKET_FEED_URL),
            seat_id=get_env("AORI_SEAT_ID", DEFAULT_SEAT_ID),
        ),
        strategy=StrategyConfig(
            prune_inactive=get_env_bool("PRUNE_INACTIVE", False),
            simulation_mode=get_env_bool("SIMULATION_MODE", True),  # Default to simulation
        ),
        logging=LogConfig(
            log_level=get_env("LOG_LEVEL", "INFO", required=False),
            json_logging=get_env_bool("JSON_LOGGING", True),
        ),
    )
