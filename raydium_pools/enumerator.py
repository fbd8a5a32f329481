"""
Bulk enumeration of program accounts with per-account decoding.

A bad account never sinks the batch: each decode failure is recorded next to
its address and the remaining accounts are still decoded.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from raydium_pools.decoder import DecodedRecord, PoolState, decode
from raydium_pools.errors import PoolFetchError
from raydium_pools.fetcher import AccountFetcher, AddressLike, RawAccount, to_pubkey
from raydium_pools.layouts import LIQUIDITY_STATE_LAYOUT_V4, RAYDIUM_AMM_V4, LayoutSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeFailure:
    address: str
    error: PoolFetchError


@dataclass
class BatchResult:
    """Decoded records plus the addresses that failed, in no particular order."""
    records: List[DecodedRecord] = field(default_factory=list)
    failures: List[DecodeFailure] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records or self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_addresses(self) -> List[str]:
        return [f.address for f in self.failures]


def decode_batch(accounts: Sequence[RawAccount], schema: LayoutSchema) -> BatchResult:
    """Decode every account, collecting failures instead of raising."""
    result = BatchResult()
    for account in accounts:
        address = str(account.address)
        try:
            result.records.append(decode(account.data, schema, address=address))
        except PoolFetchError as e:
            logger.warning(f"Skipping {address}: {e}")
            result.failures.append(DecodeFailure(address, e))
    return result


async def enumerate_accounts(fetcher: AccountFetcher, program_id: AddressLike, schema: LayoutSchema,
                             memcmp: Optional[Sequence[Tuple[int, AddressLike]]] = None) -> BatchResult:
    """Fetch all accounts of ``program_id`` sized like ``schema`` and decode them.

    An empty program yields an empty BatchResult. Connectivity failures of the
    single RPC call are raised, decode failures are collected per account.
    """
    accounts = await fetcher.fetch_program_accounts(program_id, data_size=schema.span, memcmp=memcmp or ())
    result = decode_batch(accounts, schema)
    logger.info(
        f"Decoded {len(result.records)} {schema.name} accounts for {program_id}"
        f" ({len(result.failures)} failed)"
    )
    return result


async def find_pools_by_mints(fetcher: AccountFetcher, base_mint: AddressLike, quote_mint: AddressLike,
                              program_id: AddressLike = RAYDIUM_AMM_V4) -> List[PoolState]:
    """AMM V4 pools whose base and quote mints match exactly."""
    schema = LIQUIDITY_STATE_LAYOUT_V4
    memcmp = [
        (schema.offset_of('base_mint'), to_pubkey(base_mint)),
        (schema.offset_of('quote_mint'), to_pubkey(quote_mint)),
    ]
    result = await enumerate_accounts(fetcher, program_id, schema, memcmp=memcmp)
    return [PoolState.from_record(record) for record in result.records]
