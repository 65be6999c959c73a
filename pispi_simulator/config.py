"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SCOPES = [
    "compte.read",
    "compte_transaction.read",
    "compte_transaction.write",
    "alias.read",
    "alias.write",
    "alias.delete",
    "webhook.read",
    "webhook.write",
    "webhook.delete",
    "webhook.secret",
]


class SimulatorConfig(BaseSettings):
    """PI-SPI participant simulator configuration"""

    model_config = SettingsConfigDict(
        env_prefix="PISPI_",
        env_file=".env",
        case_sensitive=False,
    )

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    version: str = "1.0.0"
    scenario: str = "perfectConformance"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules
    max_aliases_per_account: int = 20
    alias_working_set: int = 3  # physical per-account alias table size
    alias_retained_on_overflow: int = 2
    max_webhooks: int = 10
    default_page_size: int = 20
    default_motif: str = "Transfert intra-comptes"

    # Mocked OAuth2
    oauth_client_id: str = "mock-client-id"
    oauth_client_secret: str = "mock-client-secret"
    token_prefix: str = "mock-token-"
    token_expires_in: int = 3600
    granted_scopes: List[str] = list(DEFAULT_SCOPES)

    # Mocked mTLS
    mtls_default_certificate: str = "BCEAO-TEST-CERT"  # empty = certificate required
    mtls_trusted_issuers: List[str] = ["BCEAO", "PI-SPI"]


# Global configuration instance
config = SimulatorConfig()


def get_config() -> SimulatorConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SimulatorConfig:
    """Reload configuration from environment"""
    global config
    config = SimulatorConfig()
    return config
