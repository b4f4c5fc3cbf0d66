"""Application startup utilities."""

from pathlib import Path

from ..config.logging import get_logger, setup_logging
from ..config.settings import get_settings
from ..ormdb.database import create_tables


def ensure_data_directory() -> None:
    """Ensure the data directory and database tables exist."""
    logger = get_logger(__name__)

    settings = get_settings()
    data_path = Path(settings.data_directory)
    data_path.mkdir(exist_ok=True)

    logger.info("Ensured data directory exists", path=str(data_path))

    create_tables()
    logger.info("Ensured database tables exist")


def initialize_application() -> None:
    """Initialize application configuration, logging and storage."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        file_enabled=settings.log_file_enabled,
        file_path=settings.log_file_path,
        max_file_size=settings.log_max_file_size,
        backup_count=settings.log_backup_count,
    )

    ensure_data_directory()

    logger = get_logger(__name__)
    logger.info(
        "Application initialized successfully",
        environment=settings.environment,
        debug=settings.debug,
        data_dir=settings.data_directory,
        starting_cash=settings.starting_cash,
        transaction_fee=settings.transaction_fee,
    )
