"""External price feed clients."""

from chain_tracker.prices.coingecko import DEFAULT_BASE_URL, PriceFetcher, get_prices

__all__ = ["DEFAULT_BASE_URL", "PriceFetcher", "get_prices"]
