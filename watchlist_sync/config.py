"""
Configuration management for the Watchlist Sync module.
Loads settings from config.yaml and environment variables.
"""
import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel
from dotenv import load_dotenv


class ProviderConfig(BaseModel):
    """Market data provider configuration"""
    name: str = "yfinance"  # 'yfinance' or 'massive'
    default_suffix: str = ".NS"
    exchange_suffixes: Dict[str, str] = {".NS": "NSE", ".BO": "BSE"}
    default_currency: str = "INR"
    quote_timeout_seconds: float = 10.0
    historical_timeout_seconds: float = 15.0
    history_days: int = 30
    interval: str = "1d"


class MassiveConfig(BaseModel):
    """Massive API configuration"""
    api_key_env: str = "MASSIVE_API_KEY"
    base_url: str = "https://api.massive.com"


class RateLimitConfig(BaseModel):
    """Provider throttling"""
    global_min_interval_seconds: float = 0.2
    per_symbol_min_interval_seconds: float = 1.0


class CacheConfig(BaseModel):
    """Response cache configuration"""
    freshness_seconds: float = 300.0
    max_entries: Optional[int] = 2048


class DatabaseConfig(BaseModel):
    """Database configuration"""
    host: str = "localhost"
    port: int = 5432
    database: str = "watchlist"
    user: Optional[str] = None  # Direct user (for dev)
    password: Optional[str] = None  # Direct password (for dev)
    user_env: Optional[str] = None  # Or environment variable name
    password_env: Optional[str] = None  # Or environment variable name
    min_pool_size: int = 2
    max_pool_size: int = 10


class TickersConfig(BaseModel):
    """Tickers configuration"""
    watch_list: List[str] = []


class SyncConfig(BaseModel):
    """Batch synchronization defaults"""
    default_concurrency: int = 5


class DailyJobConfig(BaseModel):
    """Scheduled update job policy"""
    page_size: int = 100
    page_delay_seconds: float = 30.0
    retention_days: int = 30
    concurrency: int = 5


class SearchConfig(BaseModel):
    """Symbol lookup configuration"""
    min_query_length: int = 2
    max_results: int = 10
    min_interval_seconds: float = 0.5


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseModel):
    """Application-level configuration"""
    name: str = "Watchlist Sync"
    environment: str = "development"


class Config(BaseModel):
    """Main configuration container"""
    provider: ProviderConfig = ProviderConfig()
    massive: MassiveConfig = MassiveConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    cache: CacheConfig = CacheConfig()
    database: DatabaseConfig = DatabaseConfig()
    tickers: TickersConfig = TickersConfig()
    sync: SyncConfig = SyncConfig()
    daily_job: DailyJobConfig = DailyJobConfig()
    search: SearchConfig = SearchConfig()
    logging: LoggingConfig = LoggingConfig()
    app: AppConfig = AppConfig()

    @property
    def massive_api_key(self) -> str:
        """Get Massive API key from environment variable"""
        api_key = os.getenv(self.massive.api_key_env)
        if not api_key:
            raise ValueError(
                f"Massive API key not found in environment variable: {self.massive.api_key_env}"
            )
        return api_key

    @property
    def db_user(self) -> str:
        """Get database user (from direct config or environment variable)"""
        if self.database.user:
            return self.database.user

        if self.database.user_env:
            user = os.getenv(self.database.user_env)
            if user:
                return user

        # Default to postgres for dev
        return "postgres"

    @property
    def db_password(self) -> str:
        """Get database password (from direct config or environment variable)"""
        if self.database.password is not None:
            return self.database.password

        if self.database.password_env:
            password = os.getenv(self.database.password_env)
            if password:
                return password

        # Default to empty for dev (trust authentication)
        return ""

    @property
    def db_dsn(self) -> str:
        """Get database DSN (connection string)"""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.database.host}:{self.database.port}/{self.database.database}"


def load_config(
    config_path: str = None,
    env_file: str = None,
    search_parent_dirs: bool = True
) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to config.yaml file. If None, looks in watchlist_sync/ directory.
        env_file: Path to .env file. If None, searches for .env.local in current
                 and parent directories.
        search_parent_dirs: If True, searches parent directories for .env and config files.

    Returns:
        Config: Validated configuration object
    """
    if env_file is None:
        current_dir = Path.cwd()
        for parent in [current_dir] + list(current_dir.parents):
            env_path = parent / '.env.local'
            if env_path.exists():
                load_dotenv(env_path)
                break
        else:
            load_dotenv('.env.local')
    else:
        load_dotenv(env_file)

    if config_path is None:
        config_path = os.getenv('WATCHLIST_SYNC_CONFIG_PATH')

        if config_path is None:
            module_dir = Path(__file__).parent
            config_path = module_dir / "config.yaml"

            if not Path(config_path).exists() and search_parent_dirs:
                project_root = module_dir.parent
                alt_config = project_root / "config" / "watchlist_sync.yaml"
                if alt_config.exists():
                    config_path = alt_config

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    return Config(**config_data)


# Global config instance
_config: Config = None


def get_config(
    config_path: str = None,
    env_file: str = None,
    reload: bool = False
) -> Config:
    """
    Get the global configuration instance.

    Args:
        config_path: Optional path to config file (only used on first load or reload)
        env_file: Optional path to .env file (only used on first load or reload)
        reload: If True, reload configuration from disk

    Returns:
        Config: Configuration instance
    """
    global _config
    if _config is None or reload:
        _config = load_config(config_path=config_path, env_file=env_file)
    return _config


def set_config(config: Config) -> None:
    """
    Manually set the global configuration instance.
    Useful for testing or programmatic configuration.
    """
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance. Useful for testing."""
    global _config
    _config = None
