"""
Command line entry point.

    python -m raydium_pools pool  <pool address>
    python -m raydium_pools keys  <pool address>
    python -m raydium_pools scan  [program id] [base mint] [quote mint]
    python -m raydium_pools pair  <token mint>
    python -m raydium_pools swaps <token mint> [limit]
"""

import asyncio
import logging
import sys
from typing import Dict, List, Optional

from colorama import Fore, Style, init

from raydium_pools.config import FetchConfig
from raydium_pools.decoder import PoolState
from raydium_pools.enumerator import enumerate_accounts
from raydium_pools.errors import NotFoundError, PoolFetchError
from raydium_pools.fetcher import AccountFetcher
from raydium_pools.layouts import LIQUIDITY_STATE_LAYOUT_V4, RAYDIUM_AMM_V4
from raydium_pools.logger import log_message, setup_logger
from raydium_pools.market_data import DexScreenerClient
from raydium_pools.pools import fetch_pool_keys, fetch_pool_state
from raydium_pools.transactions import HeliusClient, summarize_swaps

# Canonical Raydium SOL-USDC pool address (legacy, but most liquid)
SOL_USDC_POOL = "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2"

USAGE = __doc__

logger = logging.getLogger(__name__)


def _fetcher() -> AccountFetcher:
    config = FetchConfig()
    return AccountFetcher(config.endpoint, config.commitment, config.timeout)


def _print_fields(title: str, fields: Dict[str, object]) -> None:
    print(f"{Fore.GREEN}✅ {title}{Style.RESET_ALL}")
    print(f"{Fore.GREEN}{'=' * 80}{Style.RESET_ALL}")
    for name, value in fields.items():
        print(f"   {name}: {value}")
    print(f"{Fore.GREEN}{'=' * 80}{Style.RESET_ALL}")


async def cmd_pool(address: str) -> int:
    print(f"{Fore.CYAN}🔍 Fetching and decoding Raydium pool: {address}{Style.RESET_ALL}")
    async with _fetcher() as fetcher:
        record = await fetch_pool_state(fetcher, address)
    state = PoolState.from_record(record)
    log_message(logger, 'pool_decoded', record.to_dict())
    _print_fields("Decoded pool data", {
        'Base Mint': state.base_mint,
        'Quote Mint': state.quote_mint,
        'Base Vault': state.base_vault,
        'Quote Vault': state.quote_vault,
        'LP Mint': state.lp_mint,
        'LP Reserve': state.lp_reserve,
        'Market': state.market_id,
        'Decimals': f"{state.base_decimal}/{state.quote_decimal}",
        'Open Time': state.pool_open_time,
        'Trade Fee': f"{state.trade_fee * 100:.3f}%",
    })
    return 0


async def cmd_keys(address: str) -> int:
    print(f"{Fore.CYAN}🔑 Resolving pool keys for {address}{Style.RESET_ALL}")
    async with _fetcher() as fetcher:
        keys = await fetch_pool_keys(fetcher, address)
    fields = {name: getattr(keys, name) for name in keys.__dataclass_fields__}
    log_message(logger, 'pool_keys', {k: str(v) for k, v in fields.items()})
    _print_fields("Pool keys", fields)
    return 0


async def cmd_scan(program_id: str, base_mint: Optional[str] = None, quote_mint: Optional[str] = None) -> int:
    schema = LIQUIDITY_STATE_LAYOUT_V4
    memcmp = []
    if base_mint:
        memcmp.append((schema.offset_of('base_mint'), base_mint))
    if quote_mint:
        memcmp.append((schema.offset_of('quote_mint'), quote_mint))

    print(f"{Fore.CYAN}🔍 Enumerating {schema.name} accounts of {program_id}{Style.RESET_ALL}")
    async with _fetcher() as fetcher:
        result = await enumerate_accounts(fetcher, program_id, schema, memcmp=memcmp)

    for record in result.records:
        print(f"{Fore.GREEN}   {record.address}  {record.base_mint} / {record.quote_mint}{Style.RESET_ALL}")
    for failure in result.failures:
        print(f"{Fore.RED}   {failure.address}  {failure.error}{Style.RESET_ALL}")
    print(f"{Fore.MAGENTA}📊 {len(result.records)} decoded, {len(result.failures)} failed{Style.RESET_ALL}")
    return 0 if result.ok else 1


async def cmd_pair(mint: str) -> int:
    async with DexScreenerClient() as client:
        pair = await client.best_pool(mint)
    if pair is None:
        print(f"{Fore.YELLOW}⚠️  No pools found for {mint}{Style.RESET_ALL}")
        return 1
    _print_fields(f"Pool {pair.pair_address} ({pair.dex_id})", {
        'Pair': f"{pair.base_symbol}/{pair.quote_symbol}",
        'Price (native)': pair.price_native,
        'Price (USD)': pair.price_usd,
        'Liquidity (USD)': pair.liquidity_usd,
        'Volume 24h': pair.volume_24h,
        'URL': pair.url,
    })
    return 0


async def cmd_swaps(mint: str, limit: int = 100) -> int:
    async with HeliusClient() as client:
        transactions = await client.address_transactions(mint, limit=limit)
    summary = summarize_swaps(transactions, mint)
    if summary is None:
        print(f"{Fore.YELLOW}⚠️  No valid trades found for {mint}{Style.RESET_ALL}")
        return 1
    _print_fields(f"Swap activity for {mint}", {
        'Buys': summary.buy_count,
        'Sells': summary.sell_count,
        'Buy Volume': summary.buy_volume,
        'Sell Volume': summary.sell_volume,
        'Buy/Sell Tx Ratio': f"{summary.buy_sell_tx_ratio:.2f}",
        'Buy/Sell Volume Ratio': f"{summary.buy_sell_volume_ratio:.2f}",
        'Last Signature': summary.last_signature,
    })
    return 0


def _dispatch(argv: List[str]):
    command, args = argv[0], argv[1:]
    if command == 'pool':
        return cmd_pool(args[0] if args else SOL_USDC_POOL)
    if command == 'keys':
        return cmd_keys(args[0] if args else SOL_USDC_POOL)
    if command == 'scan':
        program_id = args[0] if args else str(RAYDIUM_AMM_V4)
        return cmd_scan(program_id, *args[1:3])
    if command == 'pair' and args:
        return cmd_pair(args[0])
    if command == 'swaps' and args:
        return cmd_swaps(args[0], int(args[1]) if len(args) > 1 else 100)
    return None


def main(argv: Optional[List[str]] = None) -> int:
    init()
    setup_logger()
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0] in ('-h', '--help'):
        print(USAGE)
        return 0 if argv else 1

    try:
        coro = _dispatch(argv)
    except ValueError as e:
        print(f"{Fore.RED}❌ {e}{Style.RESET_ALL}")
        return 1
    if coro is None:
        print(USAGE)
        return 1

    try:
        return asyncio.run(coro)
    except NotFoundError as e:
        print(f"{Fore.YELLOW}❌ No data found: {e}{Style.RESET_ALL}")
        return 1
    except (PoolFetchError, ValueError) as e:
        logger.error(f"{argv[0]} failed: {e}")
        print(f"{Fore.RED}❌ {type(e).__name__}: {e}{Style.RESET_ALL}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted{Style.RESET_ALL}")
        return 130


if __name__ == "__main__":
    sys.exit(main())
