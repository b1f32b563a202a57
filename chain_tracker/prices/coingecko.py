"""CoinGecko price feed client.

API docs: https://docs.coingecko.com/reference/simple-price
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import httpx

from chain_tracker.infrastructure.http_client import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"

# (http_client, ids) -> {id: price}
PriceFetcher = Callable[[HttpClient, Iterable[str]], Awaitable[dict[str, float]]]


async def get_prices(
    http_client: HttpClient,
    ids: Iterable[str],
    *,
    base_url: str = DEFAULT_BASE_URL,
    vs_currency: str = "usd",
) -> dict[str, float]:
    """Fetch current prices for all ids in one request.

    Ids CoinGecko does not answer for are left out of the result. Network and
    parse failures are logged and produce an empty (or partial) mapping.
    """
    requested = list(dict.fromkeys(ids))
    if not requested:
        return {}

    logger.debug(f"Fetching {vs_currency} prices for {requested}")

    try:
        response = await http_client.get(
            f"{base_url.rstrip('/')}/simple/price",
            params={"ids": ",".join(requested), "vs_currencies": vs_currency},
        )
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch prices for {requested}: {e}", exc_info=True)
        return {}

    if not isinstance(response, dict):
        logger.error(f"Unexpected price feed response type: {type(response).__name__}")
        return {}

    prices = {}
    for gecko_id in requested:
        price = _parse_price(response.get(gecko_id), vs_currency)
        if price is None:
            logger.warning(f"No {vs_currency} price returned for {gecko_id}")
            continue
        prices[gecko_id] = price

    logger.info(f"Fetched {len(prices)}/{len(requested)} prices")
    return prices


def _parse_price(entry: Any, vs_currency: str) -> float | None:  # noqa: ANN401
    if not isinstance(entry, dict):
        return None
    value = entry.get(vs_currency)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)
