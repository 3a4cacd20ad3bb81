#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

from core.env_loader import load_env_file
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SEARCH_MODES = ('fulltext', 'substring')


@dataclass
class DatabaseConfig:
    """Database connection configuration."""
    database_url: str
    connection_timeout: int = 30


@dataclass
class ProviderConfig:
    """Credentials and request settings for the external news providers."""
    newsapi_key: Optional[str] = None
    guardian_api_key: Optional[str] = None
    nyt_api_key: Optional[str] = None
    nyt_api_secret: Optional[str] = None
    request_timeout: int = 30
    user_agent: str = "Mozilla/5.0 (compatible; NewsAggregator/1.0)"


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    # Ingestion
    max_concurrent_providers: int = 1

    # Query engine
    default_per_page: int = 15
    max_per_page: int = 100
    search_mode: str = "fulltext"

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    database: DatabaseConfig
    providers: ProviderConfig
    app: ApplicationConfig

    # Environment info
    environment: str = field(default_factory=lambda: os.getenv('ENVIRONMENT', 'development'))

    def has_newsapi(self) -> bool:
        return bool(self.providers.newsapi_key)

    def has_guardian(self) -> bool:
        return bool(self.providers.guardian_api_key)

    def has_nyt(self) -> bool:
        return bool(self.providers.nyt_api_key)


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        load_env_file(env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""

        # Database configuration (required)
        database_config = DatabaseConfig(
            database_url=self._get_required_env('DATABASE_URL'),
            connection_timeout=int(os.getenv('DB_CONNECTION_TIMEOUT', '30'))
        )

        # Provider credentials (optional, a provider without a key still runs and fails softly)
        provider_config = ProviderConfig(
            newsapi_key=os.getenv('NEWSAPI_KEY'),
            guardian_api_key=os.getenv('GUARDIAN_API_KEY'),
            nyt_api_key=os.getenv('NYT_API_KEY'),
            nyt_api_secret=os.getenv('NYT_API_SECRET'),
            request_timeout=int(os.getenv('PROVIDER_TIMEOUT', '30')),
            user_agent=os.getenv('PROVIDER_USER_AGENT', 'Mozilla/5.0 (compatible; NewsAggregator/1.0)')
        )

        app_config = ApplicationConfig(
            max_concurrent_providers=int(os.getenv('MAX_CONCURRENT_PROVIDERS', '1')),
            default_per_page=int(os.getenv('DEFAULT_PER_PAGE', '15')),
            max_per_page=int(os.getenv('MAX_PER_PAGE', '100')),
            search_mode=os.getenv('SEARCH_MODE', 'fulltext').lower(),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
        )

        config = Config(
            database=database_config,
            providers=provider_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _get_required_env(self, key: str) -> str:
        """Get required environment variable."""
        value = os.getenv(key)
        if not value:
            raise ConfigurationError(key, "required environment variable is not set")
        return value

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if not config.database.database_url.startswith(('postgresql://', 'postgres://')):
            errors.append("DATABASE_URL must be a postgresql:// connection string")

        if config.providers.request_timeout < 1:
            errors.append("PROVIDER_TIMEOUT must be at least 1 second")

        if config.app.max_concurrent_providers < 1 or config.app.max_concurrent_providers > 10:
            errors.append("MAX_CONCURRENT_PROVIDERS must be between 1 and 10")

        if config.app.max_per_page < 1:
            errors.append("MAX_PER_PAGE must be at least 1")

        if not 1 <= config.app.default_per_page <= config.app.max_per_page:
            errors.append("DEFAULT_PER_PAGE must be between 1 and MAX_PER_PAGE")

        if config.app.search_mode not in SEARCH_MODES:
            errors.append(f"SEARCH_MODE must be one of: {', '.join(SEARCH_MODES)}")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ConfigurationError('environment', '; '.join(errors))

        logger.info("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
