import asyncio
from types import SimpleNamespace
from typing import Dict, List, Optional

from solders.account import Account
from solders.pubkey import Pubkey

from raydium_pools.decoder import encode
from raydium_pools.layouts import (
    LIQUIDITY_STATE_LAYOUT_V4,
    MARKET_STATE_LAYOUT_V3,
    OPENBOOK_MARKET,
    RAYDIUM_AMM_V4,
    WSOL,
)

POOL_ADDRESS = "5CbVTTdJcLjyCxRT5XaHhNkKXMsbSiTANGSH9gg5V5Y3"
USDC = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")

PUBKEY_FIELDS_V4 = (
    'base_vault', 'quote_vault', 'base_mint', 'quote_mint', 'lp_mint', 'open_orders',
    'market_id', 'market_program_id', 'target_orders', 'withdraw_queue', 'lp_vault', 'owner',
)


def key(seed: int) -> Pubkey:
    return Pubkey.from_bytes(bytes([seed % 256]) * 32)


def pool_values(**overrides) -> Dict[str, object]:
    """A fully populated AMM V4 record with distinct, recognizable values."""
    values: Dict[str, object] = {}
    for i, name in enumerate(LIQUIDITY_STATE_LAYOUT_V4.fields):
        if name in PUBKEY_FIELDS_V4:
            values[name] = key(i + 1)
        elif name == 'padding':
            values[name] = [0, 0, 0]
        else:
            values[name] = (i + 1) * 1000
    values.update(
        status=6,
        base_decimal=9,
        quote_decimal=6,
        base_mint=WSOL,
        quote_mint=USDC,
        market_program_id=OPENBOOK_MARKET,
        trade_fee_numerator=25,
        trade_fee_denominator=10000,
        swap_base_in_amount=2 ** 100,
    )
    values.update(overrides)
    return values


def pool_buffer(**overrides) -> bytes:
    return encode(pool_values(**overrides), LIQUIDITY_STATE_LAYOUT_V4)


def market_values(own_address: Pubkey, nonce: int = 0, **overrides) -> Dict[str, object]:
    values: Dict[str, object] = {
        'head_padding': b'serum',
        'account_flags': 3,  # initialized | market
        'own_address': own_address,
        'vault_signer_nonce': nonce,
        'base_mint': WSOL,
        'quote_mint': USDC,
        'base_vault': key(201),
        'base_deposits_total': 1,
        'base_fees_accrued': 2,
        'quote_vault': key(202),
        'quote_deposits_total': 3,
        'quote_fees_accrued': 4,
        'quote_dust_threshold': 5,
        'request_queue': key(203),
        'event_queue': key(204),
        'bids': key(205),
        'asks': key(206),
        'base_lot_size': 100,
        'quote_lot_size': 10,
        'fee_rate_bps': 0,
        'referrer_rebate_accrued': 0,
        'tail_padding': b'padding',
    }
    values.update(overrides)
    return values


def market_buffer(own_address: Pubkey, nonce: int = 0) -> bytes:
    return encode(market_values(own_address, nonce), MARKET_STATE_LAYOUT_V3)


def _signer_nonce(market: Pubkey, valid: bool) -> int:
    for nonce in range(256):
        try:
            Pubkey.create_program_address([bytes(market), nonce.to_bytes(8, 'little')], OPENBOOK_MARKET)
            derived = True
        except Exception:
            derived = False
        if derived == valid:
            return nonce
    raise AssertionError(f"no {'valid' if valid else 'invalid'} signer nonce below 256")


def valid_signer_nonce(market: Pubkey) -> int:
    return _signer_nonce(market, valid=True)


def invalid_signer_nonce(market: Pubkey) -> int:
    """A nonce whose seeds land on the curve, so no vault signer exists."""
    return _signer_nonce(market, valid=False)


class FakeRpcClient:
    """Stands in for solana AsyncClient with canned accounts."""

    def __init__(self, accounts: Optional[Dict[str, bytes]] = None, owner: Pubkey = RAYDIUM_AMM_V4,
                 error: Optional[Exception] = None, delay: float = 0.0):
        self.accounts = accounts or {}
        self.owner = owner
        self.error = error
        self.delay = delay
        self.calls: List[str] = []
        self.program_calls: List[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def _account(self, data: bytes) -> Account:
        return Account(lamports=6_124_800, data=data, owner=self.owner, executable=False, rent_epoch=0)

    async def get_account_info(self, pubkey, commitment=None, encoding="base64"):
        self.calls.append(str(pubkey))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            data = self.accounts.get(str(pubkey))
            return SimpleNamespace(value=None if data is None else self._account(data))
        finally:
            self.in_flight -= 1

    async def get_program_accounts(self, pubkey, commitment=None, encoding="base64", filters=None):
        self.program_calls.append({'program': str(pubkey), 'filters': filters})
        if self.error is not None:
            raise self.error
        keyed = [
            SimpleNamespace(pubkey=Pubkey.from_string(address), account=self._account(data))
            for address, data in self.accounts.items()
        ]
        return SimpleNamespace(value=keyed)

    async def close(self):
        self.closed = True


class FakeResponse:
    def __init__(self, payload, status: int = 200, body_error: Optional[Exception] = None):
        self.payload = payload
        self.status = status
        self.body_error = body_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        pass

    async def json(self):
        if self.body_error is not None:
            raise self.body_error
        return self.payload


class FakeSession:
    """Minimal aiohttp.ClientSession replacement recording GET calls."""

    def __init__(self, payload=None, status: int = 200, error: Optional[Exception] = None,
                 body_error: Optional[Exception] = None):
        self.payload = payload
        self.status = status
        self.error = error
        self.body_error = body_error
        self.requests: List[dict] = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({'url': url, 'params': params, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.payload, self.status, self.body_error)

    async def close(self):
        pass
