"""
Fetch-and-decode operations for Raydium AMM V4 pools.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from solders.pubkey import Pubkey

from raydium_pools.config import MAX_CONCURRENT_FETCHES
from raydium_pools.decoder import DecodedRecord, PoolState, decode
from raydium_pools.enumerator import BatchResult, DecodeFailure
from raydium_pools.errors import DecodeError, PoolFetchError
from raydium_pools.fetcher import AccountFetcher, AddressLike, to_pubkey
from raydium_pools.layouts import (
    LIQUIDITY_STATE_LAYOUT_V4,
    MARKET_STATE_LAYOUT_V3,
    OPENBOOK_MARKET,
    RAYDIUM_AMM_V4,
    RAYDIUM_AUTHORITY,
    LayoutSchema,
)

logger = logging.getLogger(__name__)


async def fetch_pool_state(fetcher: AccountFetcher, address: AddressLike,
                           schema: LayoutSchema = LIQUIDITY_STATE_LAYOUT_V4) -> DecodedRecord:
    """Fetch ``address`` and decode it under ``schema``.

    Raises whatever the fetch or decode step raises: ConnectivityError,
    NotFoundError, SchemaMismatchError or DecodeError.
    """
    account = await fetcher.fetch(address)
    record = decode(account.data, schema, address=str(account.address))
    logger.info(f"Decoded {schema.name} for {account.address} ({len(account.data)} bytes)")
    return record


async def fetch_many(fetcher: AccountFetcher, addresses: Iterable[AddressLike],
                     schema: LayoutSchema = LIQUIDITY_STATE_LAYOUT_V4,
                     max_concurrency: Optional[int] = None) -> BatchResult:
    """Fetch and decode several accounts concurrently.

    Each address is independent; fetch and decode failures are collected per
    address and never cancel the others. Malformed addresses raise ValueError
    before any request is made.
    """
    limit = max_concurrency or MAX_CONCURRENT_FETCHES
    semaphore = asyncio.Semaphore(limit)
    targets = [str(to_pubkey(a)) for a in addresses]

    async def _one(address: str):
        async with semaphore:
            try:
                return await fetch_pool_state(fetcher, address, schema)
            except PoolFetchError as e:
                logger.warning(f"Fetch/decode failed for {address}: {e}")
                return DecodeFailure(address, e)

    result = BatchResult()
    for outcome in await asyncio.gather(*(_one(a) for a in targets)):
        if isinstance(outcome, DecodeFailure):
            result.failures.append(outcome)
        else:
            result.records.append(outcome)
    return result


@dataclass(frozen=True)
class PoolKeys:
    """Everything needed to build a swap against an AMM V4 pool."""
    id: Pubkey
    program_id: Pubkey
    authority: Pubkey
    base_mint: Pubkey
    quote_mint: Pubkey
    lp_mint: Pubkey
    base_decimals: int
    quote_decimals: int
    lp_decimals: int
    open_orders: Pubkey
    target_orders: Pubkey
    base_vault: Pubkey
    quote_vault: Pubkey
    market_program_id: Pubkey
    market_id: Pubkey
    market_authority: Pubkey
    market_base_vault: Pubkey
    market_quote_vault: Pubkey
    market_bids: Pubkey
    market_asks: Pubkey
    market_event_queue: Pubkey
    version: int = 4


def market_authority(market_id: Pubkey, vault_signer_nonce: int,
                     market_program_id: Pubkey = OPENBOOK_MARKET) -> Pubkey:
    """Derive the OpenBook vault signer for a market.

    Raises DecodeError when the stored nonce does not produce an off-curve
    address, which means the market account holds a bad ``vault_signer_nonce``.
    """
    seeds = [bytes(market_id), vault_signer_nonce.to_bytes(8, 'little')]
    try:
        return Pubkey.create_program_address(seeds, market_program_id)
    except Exception as e:
        logger.error(f"Vault signer derivation failed for market {market_id} (nonce {vault_signer_nonce}): {e}")
        raise DecodeError(f"vault_signer_nonce {vault_signer_nonce} does not derive a market authority: {e}",
                          address=str(market_id), field='vault_signer_nonce') from e


async def fetch_pool_keys(fetcher: AccountFetcher, pool_id: AddressLike) -> PoolKeys:
    """Resolve a pool's full key set from its state and its OpenBook market."""
    pool = PoolState.from_record(await fetch_pool_state(fetcher, pool_id))
    market = await fetch_pool_state(fetcher, pool.market_id, MARKET_STATE_LAYOUT_V3)

    return PoolKeys(
        id=to_pubkey(pool_id),
        program_id=RAYDIUM_AMM_V4,
        authority=RAYDIUM_AUTHORITY,
        base_mint=pool.base_mint,
        quote_mint=pool.quote_mint,
        lp_mint=pool.lp_mint,
        base_decimals=pool.base_decimal,
        quote_decimals=pool.quote_decimal,
        lp_decimals=pool.base_decimal,
        open_orders=pool.open_orders,
        target_orders=pool.target_orders,
        base_vault=pool.base_vault,
        quote_vault=pool.quote_vault,
        market_program_id=pool.market_program_id,
        market_id=market.own_address,
        market_authority=market_authority(market.own_address, market.vault_signer_nonce, pool.market_program_id),
        market_base_vault=market.base_vault,
        market_quote_vault=market.quote_vault,
        market_bids=market.bids,
        market_asks=market.asks,
        market_event_queue=market.event_queue,
    )
