"""
Swap history from the Helius enhanced-transactions API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from raydium_pools.config import HELIUS_API_KEY, HELIUS_API_URL
from raydium_pools.api_client import JsonApiClient
from raydium_pools.layouts import WSOL

logger = logging.getLogger(__name__)

MIN_TRADE_AMOUNT_SOL = 0.1
MAX_RATIO_CAP = 5.0
WSOL_MINT = str(WSOL)


@dataclass(frozen=True)
class SwapSummary:
    buy_count: int
    sell_count: int
    buy_volume: float
    sell_volume: float
    trade_frequency: int
    buy_sell_tx_ratio: float
    buy_sell_volume_ratio: float
    last_signature: str


class HeliusClient(JsonApiClient):
    def __init__(self, api_key: Optional[str] = None, session: Optional[aiohttp.ClientSession] = None,
                 base_url: str = HELIUS_API_URL, timeout: Optional[float] = None):
        super().__init__(base_url, session=session, timeout=timeout)
        self.api_key = api_key or HELIUS_API_KEY
        if not self.api_key:
            raise ValueError("HELIUS_API_KEY is not set")

    async def address_transactions(self, address: str, limit: int = 100,
                                   before: Optional[str] = None) -> List[Dict[str, Any]]:
        """Parsed transactions touching ``address``, newest first."""
        params: Dict[str, Any] = {'api-key': self.api_key, 'limit': limit}
        if before:
            params['before'] = before
        data = await self.get_json(f"/v0/addresses/{address}/transactions", params=params)
        transactions = data or []
        logger.info(f"Helius returned {len(transactions)} transactions for {address}")
        return transactions


def summarize_swaps(transactions: Iterable[Dict[str, Any]], token_mint: str,
                    min_sol: float = MIN_TRADE_AMOUNT_SOL) -> Optional[SwapSummary]:
    """Count Raydium buys and sells of ``token_mint`` against SOL.

    A buy sends at least ``min_sol`` WSOL and receives the token; a sell is
    the reverse. Returns None when no swap qualifies.
    """
    buy_count = sell_count = 0
    buy_volume = sell_volume = 0.0
    last_signature = ''

    for tx in transactions:
        transfers = tx.get('tokenTransfers') or []
        if tx.get('source') != 'RAYDIUM' or tx.get('type') != 'SWAP' or len(transfers) < 2:
            continue

        # a third transfer is usually the fee/wrap leg at index 0
        if len(transfers) == 2:
            sold, received = transfers[0], transfers[1]
        else:
            sold, received = transfers[1], transfers[2]

        sold_amount = float(sold.get('tokenAmount') or 0)
        received_amount = float(received.get('tokenAmount') or 0)

        if sold.get('mint') == WSOL_MINT and received.get('mint') == token_mint and sold_amount >= min_sol:
            buy_count += 1
            buy_volume += received_amount
        elif received.get('mint') == WSOL_MINT and sold.get('mint') == token_mint and received_amount >= min_sol:
            sell_count += 1
            sell_volume += sold_amount
        else:
            continue
        last_signature = tx.get('signature', last_signature)

    trade_frequency = buy_count + sell_count
    if trade_frequency == 0:
        logger.info(f"No qualifying swaps for {token_mint}")
        return None

    tx_ratio = float(buy_count) if sell_count == 0 else buy_count / sell_count
    volume_ratio = buy_volume if sell_volume == 0 else buy_volume / sell_volume

    return SwapSummary(
        buy_count=buy_count,
        sell_count=sell_count,
        buy_volume=buy_volume,
        sell_volume=sell_volume,
        trade_frequency=trade_frequency,
        buy_sell_tx_ratio=tx_ratio,
        buy_sell_volume_ratio=min(volume_ratio, MAX_RATIO_CAP),
        last_signature=last_signature,
    )
