"""
Token pair lookup on the DexScreener public API.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import aiohttp

from raydium_pools.config import DEXSCREENER_URL
from raydium_pools.api_client import JsonApiClient

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


@dataclass(frozen=True)
class PairInfo:
    pair_address: str
    dex_id: str
    url: str
    base_symbol: str
    base_address: str
    quote_symbol: str
    quote_address: str
    price_native: Optional[Decimal]
    price_usd: Optional[Decimal]
    liquidity_usd: Optional[Decimal]
    volume_24h: Optional[Decimal]
    txns_24h: Dict[str, int]

    @classmethod
    def from_api(cls, pair: Dict[str, Any]) -> 'PairInfo':
        base = pair.get('baseToken') or {}
        quote = pair.get('quoteToken') or {}
        return cls(
            pair_address=pair.get('pairAddress', ''),
            dex_id=pair.get('dexId', ''),
            url=pair.get('url', ''),
            base_symbol=base.get('symbol', ''),
            base_address=base.get('address', ''),
            quote_symbol=quote.get('symbol', ''),
            quote_address=quote.get('address', ''),
            price_native=_decimal(pair.get('priceNative')),
            price_usd=_decimal(pair.get('priceUsd')),
            liquidity_usd=_decimal((pair.get('liquidity') or {}).get('usd')),
            volume_24h=_decimal((pair.get('volume') or {}).get('h24')),
            txns_24h=dict((pair.get('txns') or {}).get('h24') or {}),
        )


class DexScreenerClient(JsonApiClient):
    def __init__(self, session: Optional[aiohttp.ClientSession] = None, base_url: str = DEXSCREENER_URL,
                 timeout: Optional[float] = None):
        super().__init__(base_url, session=session, timeout=timeout)

    async def token_pairs(self, mint: str) -> List[PairInfo]:
        """All pairs DexScreener knows for ``mint``; empty when none."""
        data = await self.get_json(f"/latest/dex/tokens/{mint}")
        pairs = (data or {}).get('pairs') or []
        logger.info(f"DexScreener returned {len(pairs)} pairs for {mint}")
        return [PairInfo.from_api(p) for p in pairs]

    async def best_pool(self, mint: str) -> Optional[PairInfo]:
        """The Raydium pair for ``mint`` if there is one, else the first pair listed."""
        pairs = await self.token_pairs(mint)
        if not pairs:
            return None
        return next((p for p in pairs if p.dex_id == 'raydium'), pairs[0])
