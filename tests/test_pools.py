import asyncio

import pytest
from solders.pubkey import Pubkey

from tests.helpers import (
    POOL_ADDRESS,
    USDC,
    invalid_signer_nonce,
    key,
    market_buffer,
    pool_buffer,
    valid_signer_nonce,
)
from raydium_pools.errors import ConnectivityError, DecodeError, NotFoundError, SchemaMismatchError
from raydium_pools.layouts import OPENBOOK_MARKET, RAYDIUM_AMM_V4, RAYDIUM_AUTHORITY, WSOL
from raydium_pools.pools import PoolKeys, fetch_many, fetch_pool_keys, fetch_pool_state, market_authority

NEVER_FUNDED = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"


def test_fetch_pool_state(make_fetcher):
    fetcher, _ = make_fetcher({POOL_ADDRESS: pool_buffer()})

    record = asyncio.run(fetch_pool_state(fetcher, POOL_ADDRESS))

    assert record.address == POOL_ADDRESS
    assert record.base_mint == WSOL
    assert record.quote_mint == USDC


def test_never_funded_address_is_not_found(make_fetcher):
    fetcher, _ = make_fetcher({POOL_ADDRESS: pool_buffer()})
    with pytest.raises(NotFoundError):
        asyncio.run(fetch_pool_state(fetcher, NEVER_FUNDED))


def test_wrong_sized_account_is_schema_mismatch(make_fetcher):
    fetcher, _ = make_fetcher({POOL_ADDRESS: bytes(165)})
    with pytest.raises(SchemaMismatchError) as exc:
        asyncio.run(fetch_pool_state(fetcher, POOL_ADDRESS))
    assert exc.value.address == POOL_ADDRESS
    assert exc.value.actual == 165


def test_fetch_many_collects_failures(make_fetcher):
    fetcher, _ = make_fetcher({POOL_ADDRESS: pool_buffer()})

    result = asyncio.run(fetch_many(fetcher, [POOL_ADDRESS, NEVER_FUNDED]))

    assert [r.address for r in result.records] == [POOL_ADDRESS]
    assert result.failed_addresses == [NEVER_FUNDED]
    assert isinstance(result.failures[0].error, NotFoundError)


def test_fetch_many_reports_connectivity_per_address(make_fetcher):
    fetcher, _ = make_fetcher(error=ConnectionResetError("reset by peer"))

    result = asyncio.run(fetch_many(fetcher, [POOL_ADDRESS, NEVER_FUNDED]))

    assert result.records == []
    assert sorted(result.failed_addresses) == sorted([POOL_ADDRESS, NEVER_FUNDED])
    assert all(isinstance(f.error, ConnectivityError) for f in result.failures)


def test_fetch_many_bounds_concurrency(make_fetcher):
    addresses = [str(key(i)) for i in range(1, 11)]
    fetcher, client = make_fetcher({a: pool_buffer() for a in addresses}, delay=0.01)

    result = asyncio.run(fetch_many(fetcher, addresses, max_concurrency=3))

    assert len(result.records) == 10
    assert 1 < client.max_in_flight <= 3


def test_market_authority_matches_program_address():
    market = key(120)
    nonce = valid_signer_nonce(market)
    expected = Pubkey.create_program_address([bytes(market), nonce.to_bytes(8, 'little')], OPENBOOK_MARKET)
    assert market_authority(market, nonce) == expected


def test_fetch_pool_keys(make_fetcher):
    market = key(120)
    nonce = valid_signer_nonce(market)
    fetcher, client = make_fetcher({
        POOL_ADDRESS: pool_buffer(market_id=market),
        str(market): market_buffer(market, nonce),
    })

    keys = asyncio.run(fetch_pool_keys(fetcher, POOL_ADDRESS))

    assert isinstance(keys, PoolKeys)
    assert keys.id == Pubkey.from_string(POOL_ADDRESS)
    assert keys.program_id == RAYDIUM_AMM_V4
    assert keys.authority == RAYDIUM_AUTHORITY
    assert keys.base_mint == WSOL
    assert keys.quote_mint == USDC
    assert keys.market_id == market
    assert keys.market_program_id == OPENBOOK_MARKET
    assert keys.market_bids == key(205)
    assert keys.market_asks == key(206)
    assert keys.market_event_queue == key(204)
    assert keys.market_authority == market_authority(market, nonce)
    assert client.calls == [POOL_ADDRESS, str(market)]


def test_fetch_pool_keys_missing_market(make_fetcher):
    fetcher, _ = make_fetcher({POOL_ADDRESS: pool_buffer(market_id=key(120))})
    with pytest.raises(NotFoundError) as exc:
        asyncio.run(fetch_pool_keys(fetcher, POOL_ADDRESS))
    assert exc.value.address == str(key(120))


def test_market_authority_rejects_on_curve_nonce():
    market = key(120)
    nonce = invalid_signer_nonce(market)
    with pytest.raises(DecodeError) as exc:
        market_authority(market, nonce)
    assert exc.value.address == str(market)
    assert exc.value.field == 'vault_signer_nonce'


def test_fetch_pool_keys_bad_signer_nonce_is_decode_error(make_fetcher):
    market = key(120)
    fetcher, _ = make_fetcher({
        POOL_ADDRESS: pool_buffer(market_id=market),
        str(market): market_buffer(market, invalid_signer_nonce(market)),
    })

    with pytest.raises(DecodeError) as exc:
        asyncio.run(fetch_pool_keys(fetcher, POOL_ADDRESS))

    assert exc.value.address == str(market)
    assert exc.value.field == 'vault_signer_nonce'
