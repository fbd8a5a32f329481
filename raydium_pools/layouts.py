"""
Fixed binary layouts for Raydium AMM V4 pool accounts and OpenBook markets.

Field order follows the layouts published in the Raydium SDK
(LIQUIDITY_STATE_LAYOUT_V4, MARKET_STATE_LAYOUT_V3). Public keys are stored as
32 raw bytes and surface as solders Pubkey values.
"""

from typing import Any, Dict, List, Mapping, Protocol, Tuple

from construct import Adapter, Array, Bytes, BytesInteger, Int64ul
from construct import Struct as cStruct
from solders.pubkey import Pubkey

# Mainnet program ids
RAYDIUM_AMM_V4 = Pubkey.from_string("675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8")
OPENBOOK_MARKET = Pubkey.from_string("srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX")
RAYDIUM_AUTHORITY = Pubkey.from_string("5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1")
WSOL = Pubkey.from_string("So11111111111111111111111111111111111111112")


class PublicKeyAdapter(Adapter):
    """32 raw bytes <-> Pubkey."""

    def __init__(self):
        super().__init__(Bytes(32))

    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        if isinstance(obj, str):
            obj = Pubkey.from_string(obj)
        return bytes(obj)


PublicKey = PublicKeyAdapter()
Int128ul = BytesInteger(16, signed=False, swapped=True)


class LayoutSchema(Protocol):
    """What the decoder needs to know about a fixed-size layout."""

    name: str

    @property
    def span(self) -> int: ...

    @property
    def fields(self) -> Tuple[str, ...]: ...

    def offset_of(self, field: str) -> int: ...

    def parse(self, buffer: bytes) -> Mapping[str, Any]: ...

    def build(self, values: Mapping[str, Any]) -> bytes: ...


class ConstructLayout:
    """LayoutSchema backed by a construct Struct of fixed-size members."""

    def __init__(self, name: str, struct: cStruct):
        self.name = name
        self.struct = struct
        self._span = struct.sizeof()
        self._offsets: Dict[str, int] = {}
        names: List[str] = []
        offset = 0
        for subcon in struct.subcons:
            if subcon.name:
                self._offsets[subcon.name] = offset
                names.append(subcon.name)
            offset += subcon.sizeof()
        self._fields = tuple(names)

    @property
    def span(self) -> int:
        return self._span

    @property
    def fields(self) -> Tuple[str, ...]:
        return self._fields

    def offset_of(self, field: str) -> int:
        try:
            return self._offsets[field]
        except KeyError:
            raise KeyError(f"{self.name} has no field '{field}'") from None

    def parse(self, buffer: bytes) -> Mapping[str, Any]:
        return self.struct.parse(buffer)

    def build(self, values: Mapping[str, Any]) -> bytes:
        return self.struct.build(dict(values))

    def __repr__(self) -> str:
        return f"ConstructLayout({self.name!r}, span={self.span})"


LIQUIDITY_STATE_LAYOUT_V4 = ConstructLayout("liquidity_state_v4", cStruct(
    "status" / Int64ul,
    "nonce" / Int64ul,
    "max_order" / Int64ul,
    "depth" / Int64ul,
    "base_decimal" / Int64ul,
    "quote_decimal" / Int64ul,
    "state" / Int64ul,
    "reset_flag" / Int64ul,
    "min_size" / Int64ul,
    "vol_max_cut_ratio" / Int64ul,
    "amount_wave_ratio" / Int64ul,
    "base_lot_size" / Int64ul,
    "quote_lot_size" / Int64ul,
    "min_price_multiplier" / Int64ul,
    "max_price_multiplier" / Int64ul,
    "system_decimal_value" / Int64ul,
    "min_separate_numerator" / Int64ul,
    "min_separate_denominator" / Int64ul,
    "trade_fee_numerator" / Int64ul,
    "trade_fee_denominator" / Int64ul,
    "pnl_numerator" / Int64ul,
    "pnl_denominator" / Int64ul,
    "swap_fee_numerator" / Int64ul,
    "swap_fee_denominator" / Int64ul,
    "base_need_take_pnl" / Int64ul,
    "quote_need_take_pnl" / Int64ul,
    "quote_total_pnl" / Int64ul,
    "base_total_pnl" / Int64ul,
    "pool_open_time" / Int64ul,
    "punish_pc_amount" / Int64ul,
    "punish_coin_amount" / Int64ul,
    "orderbook_to_init_time" / Int64ul,
    "swap_base_in_amount" / Int128ul,
    "swap_quote_out_amount" / Int128ul,
    "swap_base2quote_fee" / Int64ul,
    "swap_quote_in_amount" / Int128ul,
    "swap_base_out_amount" / Int128ul,
    "swap_quote2base_fee" / Int64ul,
    "base_vault" / PublicKey,
    "quote_vault" / PublicKey,
    "base_mint" / PublicKey,
    "quote_mint" / PublicKey,
    "lp_mint" / PublicKey,
    "open_orders" / PublicKey,
    "market_id" / PublicKey,
    "market_program_id" / PublicKey,
    "target_orders" / PublicKey,
    "withdraw_queue" / PublicKey,
    "lp_vault" / PublicKey,
    "owner" / PublicKey,
    "lp_reserve" / Int64ul,
    "padding" / Array(3, Int64ul),
))

# head/tail blobs are kept as named fields so a decoded market re-encodes byte for byte
MARKET_STATE_LAYOUT_V3 = ConstructLayout("market_state_v3", cStruct(
    "head_padding" / Bytes(5),
    "account_flags" / Int64ul,
    "own_address" / PublicKey,
    "vault_signer_nonce" / Int64ul,
    "base_mint" / PublicKey,
    "quote_mint" / PublicKey,
    "base_vault" / PublicKey,
    "base_deposits_total" / Int64ul,
    "base_fees_accrued" / Int64ul,
    "quote_vault" / PublicKey,
    "quote_deposits_total" / Int64ul,
    "quote_fees_accrued" / Int64ul,
    "quote_dust_threshold" / Int64ul,
    "request_queue" / PublicKey,
    "event_queue" / PublicKey,
    "bids" / PublicKey,
    "asks" / PublicKey,
    "base_lot_size" / Int64ul,
    "quote_lot_size" / Int64ul,
    "fee_rate_bps" / Int64ul,
    "referrer_rebate_accrued" / Int64ul,
    "tail_padding" / Bytes(7),
))
