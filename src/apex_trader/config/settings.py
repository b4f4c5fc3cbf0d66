"""Application settings and configuration management using Pydantic."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment and deployment
    environment: str = "development"
    debug: bool = False

    # Trading settings
    starting_cash: float = 100000.0
    transaction_fee: float = 1.00
    benchmark_symbol: str = "SPY"
    history_period: str = "1y"
    leaderboard_size: int = 100
    baller_threshold: float = 110000.0
    default_portfolio_id: str = "default-user"
    default_username: str = "ApexAlpha"

    # API settings
    endpoint_host: str = "0.0.0.0"
    endpoint_port: int = 8000
    api_reload: bool = False
    api_log_level: str = "INFO"

    # Database settings
    database_url: Optional[str] = None
    data_directory: str = "data"
    database_echo_sql: bool = False
    database_pool_pre_ping: bool = True
    database_pool_recycle: int = 3600

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "structured"  # 'structured' or 'plain'
    log_file_enabled: bool = True
    log_file_path: str = "data/apex_trader.log"
    log_max_file_size: str = "10MB"
    log_backup_count: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ["development", "testing", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("starting_cash", "baller_threshold")
    @classmethod
    def validate_positive_amount(cls, v):
        """Validate monetary amounts that must be strictly positive."""
        if v <= 0:
            raise ValueError("Amount must be greater than zero")
        return v

    @field_validator("transaction_fee")
    @classmethod
    def validate_fee(cls, v):
        """Validate the flat commission is not negative."""
        if v < 0:
            raise ValueError("Transaction fee cannot be negative")
        return v

    @field_validator("leaderboard_size")
    @classmethod
    def validate_leaderboard_size(cls, v):
        """Validate leaderboard size is reasonable."""
        if v < 1 or v > 1000:
            raise ValueError("Leaderboard size must be between 1 and 1000")
        return v

    @field_validator("benchmark_symbol")
    @classmethod
    def validate_benchmark_symbol(cls, v):
        """Normalize the benchmark ticker."""
        if not v or not v.strip():
            raise ValueError("Benchmark symbol must not be empty")
        return v.strip().upper()

    @field_validator("endpoint_port")
    @classmethod
    def validate_port(cls, v):
        """Validate port number is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("log_level", "api_log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["structured", "plain"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    def get_database_url(self) -> str:
        """Get the complete database URL."""
        if self.database_url:
            return self.database_url

        # Default to SQLite in data directory
        db_dir = Path(self.data_directory)
        db_dir.mkdir(exist_ok=True)
        db_path = db_dir / "apex_trader.db"
        return f"sqlite:///{db_path}"

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
