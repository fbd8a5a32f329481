"""
Raydium pool account fetching and decoding.
"""

from raydium_pools.errors import (
    PoolFetchError,
    ConnectivityError,
    NotFoundError,
    SchemaMismatchError,
    DecodeError,
)
from raydium_pools.layouts import (
    LayoutSchema,
    ConstructLayout,
    LIQUIDITY_STATE_LAYOUT_V4,
    MARKET_STATE_LAYOUT_V3,
)
from raydium_pools.decoder import DecodedRecord, PoolState, decode, encode, normalize_pool
from raydium_pools.fetcher import AccountFetcher, RawAccount
from raydium_pools.enumerator import BatchResult, DecodeFailure, enumerate_accounts, find_pools_by_mints
from raydium_pools.pools import PoolKeys, fetch_pool_state, fetch_many, fetch_pool_keys

__version__ = "0.1.0"

__all__ = [
    "PoolFetchError",
    "ConnectivityError",
    "NotFoundError",
    "SchemaMismatchError",
    "DecodeError",
    "LayoutSchema",
    "ConstructLayout",
    "LIQUIDITY_STATE_LAYOUT_V4",
    "MARKET_STATE_LAYOUT_V3",
    "DecodedRecord",
    "PoolState",
    "decode",
    "encode",
    "normalize_pool",
    "AccountFetcher",
    "RawAccount",
    "BatchResult",
    "DecodeFailure",
    "enumerate_accounts",
    "find_pools_by_mints",
    "PoolKeys",
    "fetch_pool_state",
    "fetch_many",
    "fetch_pool_keys",
]
