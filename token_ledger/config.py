"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Token ledger configuration"""

    # Token metadata
    token_name: str = "Ledger Token"
    token_symbol: str = "LGT"
    token_decimals: int = 18

    # Initialization: supply in whole tokens, scaled by token_decimals
    initial_supply: str = "1000000"
    initial_holder: str = ""  # Required when the store is fresh

    # Storage configuration: memory:// or sqlite:///path/to/file.db
    database_url: str = "sqlite:///token_ledger.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8095

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "TOKEN_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
