"""
Apex Trader - Main application entry point.

Paper trading backend: simulated trades against live quotes, achievements,
a global leaderboard and performance analytics against a benchmark index.
"""

import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from apex_trader.config.logging import get_logger
from apex_trader.config.settings import get_settings
from apex_trader.core.market_data import MarketDataError, get_quote
from apex_trader.utils.config import initialize_application


def main() -> None:
    """Main application entry point."""
    # Initialize application (logging, config, database)
    initialize_application()

    logger = get_logger(__name__)
    settings = get_settings()

    if "-quote" in sys.argv:
        # Quote mode for checking market data connectivity
        try:
            symbol = sys.argv[sys.argv.index("-quote") + 1].upper()
        except IndexError:
            print("Error: Please provide a stock symbol after -quote flag.")
            sys.exit(1)

        try:
            quote = get_quote(symbol)
        except MarketDataError as e:
            logger.error("Quote lookup failed", symbol=symbol, error=str(e))
            print(f"Error: {e}")
            sys.exit(1)

        print(
            f"{quote.symbol}: {quote.price:.2f} "
            f"({quote.change:+.2f}, {quote.change_percent:+.2f}%)"
        )
        return

    logger.info(
        "Starting API server",
        host=settings.endpoint_host,
        port=settings.endpoint_port,
    )

    try:
        uvicorn.run(
            "apex_trader.webapi.app:app",
            host=settings.endpoint_host,
            port=settings.endpoint_port,
            reload=settings.api_reload,
            log_level=settings.api_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        print("\nShutting down...")


if __name__ == "__main__":
    main()
