"""Command-line entry point: run one screening scan and log the ranked results."""

import asyncio
import logging
import os
import sys
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .core.exceptions import InvalidStrategyError
from .core.models import ScreeningResult
from .data.connector import create_connector
from .screener.orchestrator import ScreeningService

logger = logging.getLogger(__name__)


def _configure_logging(level: int = logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('coin_screener.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )


def _default_config() -> Dict:
    """Default configuration."""
    return {
        'provider': {
            'name': 'upbit',
            'quote_currency': 'KRW',
            'timeout_seconds': 10,
        },
        'screener': {
            'strategy': 'all',
            'request_delay_seconds': 0.5,  # Upbit allows ~10 req/s on public endpoints
            'candle_count': 30,
            'max_results': 20,
        },
    }


def _config_from_env() -> Dict:
    """Build config dict from environment variables."""
    config: Dict = {}

    provider = os.getenv('SCREENER_PROVIDER', '').strip()
    quote = os.getenv('SCREENER_QUOTE_CURRENCY', '').strip()
    timeout = os.getenv('SCREENER_TIMEOUT', '').strip()
    if provider or quote or timeout:
        config['provider'] = {}
        if provider:
            config['provider']['name'] = provider
        if quote:
            config['provider']['quote_currency'] = quote.upper()
        if timeout:
            config['provider']['timeout_seconds'] = float(timeout)

    strategy = os.getenv('SCREENER_STRATEGY', '').strip()
    delay = os.getenv('SCREENER_REQUEST_DELAY', '').strip()
    count = os.getenv('SCREENER_CANDLE_COUNT', '').strip()
    max_results = os.getenv('SCREENER_MAX_RESULTS', '').strip()
    if any([strategy, delay, count, max_results]):
        config['screener'] = {}
        if strategy:
            config['screener']['strategy'] = strategy
        if delay:
            config['screener']['request_delay_seconds'] = float(delay)
        if count:
            config['screener']['candle_count'] = int(count)
        if max_results:
            config['screener']['max_results'] = int(max_results)

    return config


def load_config(overrides: Optional[Dict] = None) -> Dict:
    """Merge environment and explicit overrides into the defaults, section by section."""
    config = _default_config()
    for source in (_config_from_env(), overrides or {}):
        for key, val in source.items():
            if isinstance(val, dict) and isinstance(config.get(key), dict):
                config[key].update(val)
            else:
                config[key] = val
    return config


def format_result(rank: int, result: ScreeningResult) -> str:
    """One summary line for a screening result."""
    name = result.coin.english_name or result.coin.market
    line = f"{rank:>3}. {result.coin.market} ({name}): {', '.join(result.conditions)}"
    if result.current_price is not None:
        line += f" | price={result.current_price:,.8g}"
    if result.metrics is not None:
        if result.metrics.hma20 is not None:
            line += f" hma20={result.metrics.hma20:,.8g}"
        if result.metrics.volume_ratio is not None:
            line += f" vol_ratio={result.metrics.volume_ratio:.2f}"
        if result.metrics.rsi14 is not None:
            line += f" rsi14={result.metrics.rsi14:.1f}"
    return line


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    argv = sys.argv[1:] if argv is None else argv

    config = load_config()
    screener_cfg = dict(config['screener'])
    strategy = screener_cfg.pop('strategy')
    if argv:
        strategy = argv[0]

    repository = create_connector(config['provider'])
    service = ScreeningService(repository, screener_cfg)

    try:
        results = await service.screen(strategy)
    except InvalidStrategyError as e:
        logger.error(str(e))
        return 2
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 130
    finally:
        await repository.close()

    logger.info(f"{len(results)} coins matched '{strategy}'")
    for rank, result in enumerate(service.get_top_results(), start=1):
        logger.info(format_result(rank, result))
    return 0


def run():
    """Console script entry point."""
    _configure_logging()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
