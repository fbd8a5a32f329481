"""
Layout decoder: raw account bytes -> immutable record.

Decoding is all or nothing. A buffer whose length differs from the layout
span is rejected before parsing, and any parse or conversion failure raises
DecodeError without returning a partially filled record.
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional, Union

from construct import ConstructError
from solders.pubkey import Pubkey

from raydium_pools.errors import DecodeError, SchemaMismatchError
from raydium_pools.layouts import LIQUIDITY_STATE_LAYOUT_V4, LayoutSchema

logger = logging.getLogger(__name__)


def _convert(value: Any) -> Any:
    """Strip construct containers down to plain immutable Python values."""
    if isinstance(value, (Pubkey, int, bool, bytes, float)):
        return value
    if isinstance(value, str):
        # construct Enum members parse to EnumIntegerString; keep the member name
        return str(value)
    if isinstance(value, dict):
        return MappingProxyType({k: _convert(v) for k, v in value.items() if not k.startswith('_')})
    if isinstance(value, (list, tuple)):
        return tuple(_convert(v) for v in value)
    raise TypeError(f"unsupported field value of type {type(value).__name__}")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Pubkey):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    return value


class DecodedRecord(Mapping):
    """Read-only mapping of field name to decoded value, with attribute access."""

    __slots__ = ('_layout', '_values', '_address')

    def __init__(self, layout: str, values: Mapping[str, Any], address: Optional[str] = None):
        object.__setattr__(self, '_layout', layout)
        object.__setattr__(self, '_values', MappingProxyType(dict(values)))
        object.__setattr__(self, '_address', address)

    @property
    def layout(self) -> str:
        return self._layout

    @property
    def address(self) -> Optional[str]:
        return self._address

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"{self._layout} record has no field '{name}'") from None

    def __setattr__(self, name, value):
        raise AttributeError("DecodedRecord is immutable")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly copy: keys as base58, blobs as hex."""
        return {k: _jsonable(v) for k, v in self._values.items()}

    def __repr__(self) -> str:
        return f"DecodedRecord(layout={self._layout!r}, address={self._address!r}, fields={len(self)})"


def decode(buffer: bytes, schema: LayoutSchema, address: Optional[str] = None) -> DecodedRecord:
    """Decode ``buffer`` under ``schema``.

    Raises:
        SchemaMismatchError: buffer length is not exactly ``schema.span``
        DecodeError: a field could not be parsed or converted
    """
    data = bytes(buffer)
    if len(data) != schema.span:
        raise SchemaMismatchError(schema.span, len(data), address=address, layout=schema.name)

    try:
        parsed = schema.parse(data)
    except (ConstructError, ValueError, TypeError) as e:
        raise DecodeError(f"{schema.name} parse failed: {e}", address=address) from e

    values: Dict[str, Any] = {}
    for field in schema.fields:
        try:
            values[field] = _convert(parsed[field])
        except KeyError:
            raise DecodeError(f"{schema.name} field '{field}' missing from parse result",
                              address=address, field=field) from None
        except TypeError as e:
            raise DecodeError(f"{schema.name} field '{field}': {e}", address=address, field=field) from e
        if isinstance(values[field], int) and not isinstance(values[field], bool) and values[field] < 0:
            raise DecodeError(f"{schema.name} field '{field}' is negative", address=address, field=field)

    return DecodedRecord(schema.name, values, address)


def encode(record: Mapping[str, Any], schema: LayoutSchema) -> bytes:
    """Inverse of decode: build the raw buffer for ``record``."""
    missing = [f for f in schema.fields if f not in record]
    if missing:
        raise DecodeError(f"{schema.name} record is missing fields: {', '.join(missing)}")
    try:
        return schema.build({f: record[f] for f in schema.fields})
    except (ConstructError, ValueError, TypeError) as e:
        raise DecodeError(f"{schema.name} build failed: {e}") from e


@dataclass(frozen=True)
class PoolState:
    """Typed view over a decoded AMM V4 liquidity state."""
    pool_id: Optional[str]
    status: int
    base_mint: Pubkey
    quote_mint: Pubkey
    base_vault: Pubkey
    quote_vault: Pubkey
    base_decimal: int
    quote_decimal: int
    lp_mint: Pubkey
    lp_reserve: int
    open_orders: Pubkey
    target_orders: Pubkey
    market_id: Pubkey
    market_program_id: Pubkey
    pool_open_time: int
    trade_fee_numerator: int
    trade_fee_denominator: int
    swap_fee_numerator: int
    swap_fee_denominator: int
    swap_base_in_amount: int
    swap_quote_out_amount: int
    swap_quote_in_amount: int
    swap_base_out_amount: int

    @classmethod
    def from_record(cls, record: DecodedRecord) -> 'PoolState':
        if record.layout != LIQUIDITY_STATE_LAYOUT_V4.name:
            raise ValueError(f"expected a {LIQUIDITY_STATE_LAYOUT_V4.name} record, got {record.layout}")
        kwargs = {name: record[name] for name in cls.__dataclass_fields__ if name != 'pool_id'}
        return cls(pool_id=record.address, **kwargs)

    @property
    def trade_fee(self) -> float:
        if not self.trade_fee_denominator:
            return 0.0
        return self.trade_fee_numerator / self.trade_fee_denominator

    @property
    def swap_fee(self) -> float:
        if not self.swap_fee_denominator:
            return 0.0
        return self.swap_fee_numerator / self.swap_fee_denominator


def normalize_pool(state: PoolState, expected_base_mint: Union[Pubkey, str]) -> PoolState:
    """Return ``state`` oriented so that ``expected_base_mint`` is the base side.

    Pools are sometimes created with the token as the quote side. Mints,
    decimals and vaults are swapped together; everything else is unchanged.
    """
    if isinstance(expected_base_mint, str):
        expected_base_mint = Pubkey.from_string(expected_base_mint)

    if state.base_mint == expected_base_mint:
        return state
    if state.quote_mint != expected_base_mint:
        raise ValueError(f"mint {expected_base_mint} is not part of pool {state.pool_id}")

    logger.info(f"Pool {state.pool_id} is reversed, swapping base/quote")
    return replace(
        state,
        base_mint=state.quote_mint,
        quote_mint=state.base_mint,
        base_decimal=state.quote_decimal,
        quote_decimal=state.base_decimal,
        base_vault=state.quote_vault,
        quote_vault=state.base_vault,
    )

