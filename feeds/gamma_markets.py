# file: feeds/gamma_markets.py
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger("feeds.gamma_markets")

GAMMA_API_BASE = "https://gamma-api.polymarket.com"
MAX_SEARCH_RESULTS = 20


class MarketServiceError(Exception):
    """Raised when market discovery fails."""
    pass


@dataclass
class MarketInfo:
    id: str
    question: str
    active: bool = True
    order_book_enabled: bool = False
    volume: str = "0"
    outcomes: List[str] = field(default_factory=list)
    prices: List[float] = field(default_factory=list)  # aligned with outcomes

    @classmethod
    def placeholder(cls, market_id: str) -> "MarketInfo":
        """Minimal entry for a market known only by id."""
        return cls(id=market_id, question=market_id)


def _string_or_list(value: Any) -> List[str]:
    """Gamma returns list fields either as JSON arrays or as strings holding one."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    text = str(value)
    if text.startswith("["):
        try:
            return [str(v) for v in json.loads(text)]
        except json.JSONDecodeError as e:
            raise MarketServiceError(f"Malformed list field: {text[:60]}") from e
    if not text:
        return []
    return [text]


def parse_gamma_market(raw: Dict[str, Any]) -> MarketInfo:
    """Convert one Gamma API market row to MarketInfo."""
    prices = []
    for p in _string_or_list(raw.get("outcomePrices")):
        try:
            prices.append(float(p))
        except ValueError:
            continue

    # Use id if conditionId is empty
    market_id = raw.get("conditionId") or str(raw.get("id") or "")

    return MarketInfo(
        id=market_id,
        question=raw.get("question") or "",
        active=bool(raw.get("active", False)) and not bool(raw.get("closed", False)),
        order_book_enabled=bool(raw.get("enableOrderBook", False)),
        volume=str(raw.get("volume", "") or "0"),
        outcomes=_string_or_list(raw.get("outcomes")),
        prices=prices,
    )


def _matches(raw: Dict[str, Any], keyword: str) -> bool:
    keyword_lower = keyword.lower()
    return (
        keyword_lower in (raw.get("question") or "").lower()
        or keyword_lower in (raw.get("description") or "").lower()
    )


class GammaMarketService:
    """
    Market discovery via the Polymarket Gamma API.
    Only CLOB (order book) enabled markets are returned.
    """

    def __init__(self, base_url: str = GAMMA_API_BASE, timeout_secs: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_secs = timeout_secs
        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self):
        """Initialize HTTP session"""
        timeout = aiohttp.ClientTimeout(total=self.timeout_secs)
        self.session = aiohttp.ClientSession(timeout=timeout)
        logger.info(f"[GAMMA] Session ready: {self.base_url}")

    async def close(self):
        """Close HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None

    async def _fetch(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not self.session:
            await self.initialize()

        url = f"{self.base_url}/markets"
        try:
            async with self.session.get(url, params=params) as resp:
                if resp.status != 200:
                    raise MarketServiceError(f"Failed to fetch markets: HTTP {resp.status}")
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise MarketServiceError(f"Request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise MarketServiceError(f"Malformed response: {e}") from e

        if not isinstance(data, list):
            raise MarketServiceError("Unexpected response shape")
        return data

    async def search_markets(self, keyword: str, limit: int) -> List[MarketInfo]:
        """Search active markets by keyword (question or description)."""
        rows = await self._fetch({"limit": limit, "closed": "false", "active": "true"})
        results = [
            parse_gamma_market(raw)
            for raw in rows
            if isinstance(raw, dict)
            and _matches(raw, keyword)
            and raw.get("enableOrderBook")
        ]
        logger.info(f"[GAMMA] search '{keyword}': {len(results)} of {len(rows)}")
        return results[:MAX_SEARCH_RESULTS]

    async def get_trending_markets(self, limit: int) -> List[MarketInfo]:
        """Active markets ordered by volume, descending."""
        rows = await self._fetch({
            "limit": limit,
            "closed": "false",
            "active": "true",
            "order": "volume",
            "ascending": "false",
        })
        return [
            parse_gamma_market(raw)
            for raw in rows
            if isinstance(raw, dict) and raw.get("enableOrderBook")
        ]

    async def get_market(self, market_id: str) -> Optional[MarketInfo]:
        """Fetch a market by id. Returns None when absent or on HTTP error."""
        try:
            rows = await self._fetch({"id": market_id})
        except MarketServiceError as e:
            logger.warning(f"[GAMMA] get_market {market_id}: {e}")
            return None
        if not rows or not isinstance(rows[0], dict):
            return None
        return parse_gamma_market(rows[0])
