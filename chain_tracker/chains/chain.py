"""Cosmos SDK chain adapter.

One instance per configured chain. All network I/O goes through the shared
HttpClient (REST and JSON-RPC) or a per-chain WebSocket (Tendermint events).
The instance owns its snapshot state and guards it with an asyncio.Lock, so
it is safe to call from several fan-out tasks at once.
"""

import asyncio
import json
import logging
import re
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

import httpx
import websockets
from websockets.exceptions import WebSocketException
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_never,
    wait_exponential,
)

from chain_tracker.chains.config import ChainConfig
from chain_tracker.chains.dto import BlockEvent, ChainData, ValidatorInfo
from chain_tracker.db.models import Validator
from chain_tracker.db.unit_of_work import UOWFactoryType
from chain_tracker.infrastructure.http_client import HttpClient

NEW_BLOCK_QUERY = "tm.event='NewBlock'"

# SDK v0.46 moved total supply lookups to a query parameter
_SUPPLY_BY_DENOM_SINCE = 46

_FRACTION_RE = re.compile(r"\.(\d+)")


class ChainRequestError(Exception):
    """A chain endpoint failed or answered with something unusable."""

    def __init__(self, chain: str, message: str) -> None:
        super().__init__(f"{chain}: {message}")
        self.chain = chain


class SubscriptionClosed(Exception):
    """The event stream ended; the subscription reconnects."""


_RECONNECT_ERRORS = (
    WebSocketException,
    OSError,
    SubscriptionClosed,
)


class Chain:
    """Adapter for one Cosmos SDK network."""

    VALIDATORS_PAGE_LIMIT = 200
    WS_OPEN_TIMEOUT = 10.0
    WS_PING_INTERVAL = 20.0
    RECONNECT_MAX_WAIT = 60

    def __init__(
        self,
        config: ChainConfig,
        http_client: HttpClient,
        uow_factory: UOWFactoryType,
    ) -> None:
        self.config = config
        self._http = http_client
        self._uow_factory = uow_factory
        self._lock = asyncio.Lock()
        self._data = ChainData()
        self._price: float | None = None
        self._price_updated_at: datetime | None = None
        self._last_event: BlockEvent | None = None

    def __repr__(self) -> str:
        return f"Chain({self.config.name!r})"

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def logger(self) -> logging.Logger:
        """Per-chain logger, switched to DEBUG by DEBUG_CHAINS."""
        return logging.getLogger(f"chain_tracker.chains.{self.name}")

    @property
    def logger_events(self) -> logging.Logger:
        """Dedicated logger for the event subscription (DEBUG_CHAINS_EVENTS)."""
        return logging.getLogger(f"chain_tracker.chains.{self.name}.events")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def data(self) -> ChainData:
        return replace(self._data)

    @property
    def price(self) -> float | None:
        return self._price

    @property
    def price_updated_at(self) -> datetime | None:
        return self._price_updated_at

    @property
    def last_event(self) -> BlockEvent | None:
        return self._last_event

    @property
    def market_cap(self) -> float | None:
        """Total supply valued in the price currency."""
        if self._price is None or self._data.total_supply is None:
            return None
        return self._data.total_supply * self._price

    async def validators(self, include_removed: bool = False) -> list[Validator]:
        async with self._uow_factory() as uow:
            return list(await uow.validators.get_by_chain(self.name, include_removed))

    # ------------------------------------------------------------------
    # update_data
    # ------------------------------------------------------------------

    async def update_data(self) -> None:
        """Refresh the on-chain snapshot.

        The latest-block query is mandatory; every other query fails on its own
        and leaves the previous value of its fields in place.
        """
        self.logger.debug(f"Updating data for {self.name}")

        optional = {
            "staking pool": self._fetch_staking_pool(),
            "total supply": self._fetch_total_supply(),
            "inflation": self._fetch_inflation(),
            "community pool": self._fetch_community_pool(),
        }
        if self.config.has_jsonrpc:
            optional["evm block height"] = self._fetch_evm_block_height()

        block, *results = await asyncio.gather(
            self._fetch_latest_block(), *optional.values(), return_exceptions=True
        )

        if isinstance(block, BaseException):
            if not isinstance(block, Exception):
                raise block
            raise ChainRequestError(self.name, f"latest block query failed: {block}") from block

        fields: dict[str, Any] = {}
        for label, result in zip(optional, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self.logger.warning(f"{self.name}: {label} query failed: {result}")
                continue
            fields.update(result)

        async with self._lock:
            current_height = self._data.block_height
            if current_height is not None and block["block_height"] < current_height:
                # the event stream is already ahead of REST
                block = {"chain_id": block["chain_id"]}
            self._data = replace(
                self._data, **block, **fields, updated_at=datetime.now(UTC)
            )

        self.logger.info(
            f"Updated data for {self.name}: height={self._data.block_height}, "
            f"{len(fields)}/{len(optional)} optional fields refreshed"
        )

    async def _rest_get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._http.get(f"{self.config.rest_url.rstrip('/')}{path}", params=params)
        if not isinstance(response, dict):
            raise ChainRequestError(self.name, f"unexpected response from {path}")
        return response

    async def _fetch_latest_block(self) -> dict[str, Any]:
        response = await self._rest_get("/cosmos/base/tendermint/v1beta1/blocks/latest")
        header = response["block"]["header"]
        return {
            "chain_id": header["chain_id"],
            "block_height": int(header["height"]),
            "block_time": parse_time(header.get("time")),
        }

    async def _fetch_staking_pool(self) -> dict[str, Any]:
        response = await self._rest_get("/cosmos/staking/v1beta1/pool")
        pool = response["pool"]
        return {
            "bonded_tokens": self.config.to_display(pool["bonded_tokens"]),
            "not_bonded_tokens": self.config.to_display(pool["not_bonded_tokens"]),
        }

    async def _fetch_total_supply(self) -> dict[str, Any]:
        denom = self.config.main_denom
        if self.config.sdk_version >= _SUPPLY_BY_DENOM_SINCE:
            response = await self._rest_get(
                "/cosmos/bank/v1beta1/supply/by_denom", params={"denom": denom}
            )
        else:
            response = await self._rest_get(f"/cosmos/bank/v1beta1/supply/{denom}")
        return {"total_supply": self.config.to_display(response["amount"]["amount"])}

    async def _fetch_inflation(self) -> dict[str, Any]:
        response = await self._rest_get("/cosmos/mint/v1beta1/inflation")
        return {"inflation": float(response["inflation"])}

    async def _fetch_community_pool(self) -> dict[str, Any]:
        response = await self._rest_get("/cosmos/distribution/v1beta1/community_pool")
        for coin in response.get("pool", []):
            if coin.get("denom") == self.config.main_denom:
                return {"community_pool": self.config.to_display(coin["amount"])}
        return {"community_pool": 0.0}

    async def _fetch_evm_block_height(self) -> dict[str, Any]:
        assert self.config.jsonrpc_url is not None
        response = await self._http.post(
            self.config.jsonrpc_url,
            json={"jsonrpc": "2.0", "method": "eth_blockNumber", "params": [], "id": 1},
            headers={"Content-Type": "application/json"},
        )
        if not isinstance(response, dict) or "result" not in response:
            error = response.get("error") if isinstance(response, dict) else response
            raise ChainRequestError(self.name, f"eth_blockNumber failed: {error}")
        return {"evm_block_height": int(response["result"], 16)}

    # ------------------------------------------------------------------
    # update_price
    # ------------------------------------------------------------------

    async def update_price(self, price: float | None) -> None:
        """Store the latest price; None means no price is available right now."""
        async with self._lock:
            self._price = price
            self._price_updated_at = datetime.now(UTC)

        if price is None:
            self.logger.warning(f"No price available for {self.name}")
        else:
            self.logger.debug(f"Updated price for {self.name}: {price}")

    # ------------------------------------------------------------------
    # update_validator_database
    # ------------------------------------------------------------------

    async def update_validator_database(self) -> None:
        """Fetch the full validator set and upsert it into the validator store.

        Stored validators missing from the response are flagged as removed.
        """
        self.logger.info(f"Starting validator database update for {self.name}")

        try:
            infos = await self.fetch_validators()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise ChainRequestError(self.name, f"validator query failed: {e}") from e

        if not infos:
            self.logger.warning(f"No validators returned for {self.name}, keeping stored set")
            return

        now = datetime.now(UTC)
        records = [
            Validator(
                chain=self.name,
                operator_address=info.operator_address,
                moniker=info.moniker,
                tokens=info.tokens,
                commission_rate=info.commission_rate,
                jailed=info.jailed,
                status=info.status,
                website=info.website,
                details=info.details,
                removed=False,
                updated_at=now,
            )
            for info in infos
        ]

        async with self._uow_factory() as uow:
            await uow.validators.upsert_many(records)
            removed_count = await uow.validators.mark_removed(
                self.name, keep=[record.operator_address for record in records]
            )

        self.logger.info(
            f"Validator database updated for {self.name}: "
            f"{len(records)} active, {removed_count} removed"
        )

    async def fetch_validators(self, max_pages: int | None = None) -> list[ValidatorInfo]:
        """Page through the staking module's validator list."""
        validators: list[ValidatorInfo] = []
        next_key: str | None = None
        pages = 0

        while True:
            params: dict[str, Any] = {"pagination.limit": self.VALIDATORS_PAGE_LIMIT}
            if next_key:
                params["pagination.key"] = next_key

            response = await self._rest_get("/cosmos/staking/v1beta1/validators", params=params)
            for raw_validator in response.get("validators", []):
                info = self._parse_validator(raw_validator)
                if info is not None:
                    validators.append(info)

            pages += 1
            next_key = (response.get("pagination") or {}).get("next_key")
            if not next_key or (max_pages is not None and pages >= max_pages):
                break

        self.logger.debug(f"Fetched {len(validators)} validators from {self.name} in {pages} page(s)")
        return validators

    def _parse_validator(self, raw: dict[str, Any]) -> ValidatorInfo | None:
        operator_address = raw["operator_address"]
        if not operator_address.startswith(self.config.valoper_prefix):
            self.logger.warning(
                f"Skipping validator {operator_address} on {self.name}: "
                f"expected prefix {self.config.valoper_prefix}"
            )
            return None

        description = raw.get("description") or {}
        rates = (raw.get("commission") or {}).get("commission_rates") or {}
        return ValidatorInfo(
            operator_address=operator_address,
            moniker=description.get("moniker", ""),
            tokens=self.config.to_display(raw.get("tokens", 0)),
            commission_rate=float(rates.get("rate", 0)),
            jailed=bool(raw.get("jailed", False)),
            status=raw.get("status", ""),
            website=description.get("website", ""),
            details=description.get("details", ""),
        )

    # ------------------------------------------------------------------
    # subscribe_to_events
    # ------------------------------------------------------------------

    async def subscribe_to_events(self) -> None:
        """Follow NewBlock events until cancelled, reconnecting with backoff."""
        self.logger_events.info(f"Subscribing to events for {self.name} at {self.config.wss_url}")

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(_RECONNECT_ERRORS),
            wait=wait_exponential(multiplier=1, max=self.RECONNECT_MAX_WAIT),
            stop=stop_never,
            before_sleep=self._log_reconnect,
            reraise=True,
        ):
            with attempt:
                await self._run_event_session()

    def _log_reconnect(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        self.logger_events.warning(
            f"Event subscription for {self.name} dropped ({exc!r}), "
            f"reconnecting in {wait:.1f}s (attempt {retry_state.attempt_number})"
        )

    async def _run_event_session(self) -> None:
        async with websockets.connect(
            self.config.wss_url,
            open_timeout=self.WS_OPEN_TIMEOUT,
            ping_interval=self.WS_PING_INTERVAL,
        ) as websocket:
            await websocket.send(
                json.dumps(
                    {
                        "jsonrpc": "2.0",
                        "method": "subscribe",
                        "id": 0,
                        "params": {"query": NEW_BLOCK_QUERY},
                    }
                )
            )
            self.logger_events.info(f"Event subscription for {self.name} established")

            async for message in websocket:
                await self.handle_event_message(message)

        raise SubscriptionClosed(f"{self.name}: event stream closed by server")

    async def handle_event_message(self, message: str | bytes) -> BlockEvent | None:
        """Apply one WebSocket message; returns the parsed block event, if any."""
        try:
            payload = json.loads(message)
        except json.JSONDecodeError:
            self.logger_events.warning(f"Ignoring non-JSON event message on {self.name}")
            return None

        if not isinstance(payload, dict):
            self.logger_events.warning(f"Ignoring non-object event message on {self.name}")
            return None

        if "error" in payload:
            raise ChainRequestError(self.name, f"event subscription rejected: {payload['error']}")

        try:
            event = parse_new_block(payload)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger_events.warning(f"Ignoring malformed event message on {self.name}: {e}")
            return None
        if event is None:
            # subscription ack or an event type we do not follow
            return None

        async with self._lock:
            if self._data.block_height is None or event.height > self._data.block_height:
                self._data = replace(
                    self._data, block_height=event.height, block_time=event.time
                )
            self._last_event = event

        self.logger_events.debug(
            f"New block on {self.name}: height={event.height} txs={event.num_txs}"
        )
        return event


def parse_new_block(payload: dict[str, Any]) -> BlockEvent | None:
    """Extract a BlockEvent from a Tendermint NewBlock subscription message."""
    data = (payload.get("result") or {}).get("data") or {}
    if data.get("type") != "tendermint/event/NewBlock":
        return None

    block = (data.get("value") or {}).get("block") or {}
    header = block.get("header") or {}
    if "height" not in header:
        return None

    txs = (block.get("data") or {}).get("txs") or []
    return BlockEvent(
        height=int(header["height"]),
        time=parse_time(header.get("time")),
        num_txs=len(txs),
    )


def parse_time(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp with up to nanosecond precision."""
    if not value:
        return None
    # datetime only keeps microseconds
    normalized = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    normalized = normalized.replace("Z", "+00:00")
    return datetime.fromisoformat(normalized)
