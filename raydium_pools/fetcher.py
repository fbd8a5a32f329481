"""
Read-only account fetching over Solana JSON-RPC.

Every call is a single attempt. Transport failures surface as
ConnectivityError; an account that does not exist surfaces as NotFoundError.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import MemcmpOpts
from solders.pubkey import Pubkey

from raydium_pools.config import FetchConfig
from raydium_pools.errors import ConnectivityError, NotFoundError

logger = logging.getLogger(__name__)

AddressLike = Union[str, Pubkey]

_TRANSPORT_ERRORS = (SolanaRpcException, RPCException, OSError, asyncio.TimeoutError)


def to_pubkey(address: AddressLike) -> Pubkey:
    """Parse a base58 address; raises ValueError for malformed input."""
    if isinstance(address, Pubkey):
        return address
    try:
        return Pubkey.from_string(address.strip())
    except (ValueError, AttributeError) as e:
        raise ValueError(f"invalid account address: {address!r}") from e


@dataclass(frozen=True)
class RawAccount:
    """Account bytes plus ownership metadata, as returned by the RPC node."""
    address: Pubkey
    data: bytes
    owner: Pubkey
    lamports: int
    executable: bool = False
    rent_epoch: int = 0

    @classmethod
    def from_rpc(cls, address: Pubkey, account: Any) -> 'RawAccount':
        return cls(
            address=address,
            data=bytes(account.data),
            owner=account.owner,
            lamports=account.lamports,
            executable=account.executable,
            rent_epoch=account.rent_epoch,
        )


class AccountFetcher:
    def __init__(self, endpoint: Optional[str] = None, commitment: Optional[str] = None,
                 timeout: Optional[float] = None, client: Optional[AsyncClient] = None):
        """Create a fetcher for ``endpoint``; settings default to FetchConfig."""
        defaults = FetchConfig()
        self.endpoint = endpoint or defaults.endpoint
        self.commitment = Commitment(commitment or defaults.commitment)
        self.timeout = timeout or defaults.timeout
        self.client = client or AsyncClient(self.endpoint, commitment=self.commitment, timeout=self.timeout)

    async def __aenter__(self) -> 'AccountFetcher':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def fetch(self, address: AddressLike) -> RawAccount:
        """Fetch the current bytes stored at ``address``.

        Raises:
            ValueError: ``address`` is not a valid base58 public key
            NotFoundError: no account exists at ``address``
            ConnectivityError: the RPC call failed or timed out
        """
        pubkey = to_pubkey(address)
        logger.debug(f"Fetching account {pubkey}")
        try:
            resp = await asyncio.wait_for(
                self.client.get_account_info(pubkey, commitment=self.commitment, encoding="base64"),
                timeout=self.timeout,
            )
        except _TRANSPORT_ERRORS as e:
            logger.error(f"RPC getAccountInfo failed for {pubkey}: {e}")
            raise ConnectivityError(f"getAccountInfo failed via {self.endpoint}: {e}", str(pubkey)) from e

        if resp.value is None:
            logger.info(f"No account found at {pubkey}")
            raise NotFoundError("account does not exist", str(pubkey))

        return RawAccount.from_rpc(pubkey, resp.value)

    async def fetch_program_accounts(self, program_id: AddressLike, data_size: Optional[int] = None,
                                     memcmp: Sequence[Tuple[int, AddressLike]] = ()) -> List[RawAccount]:
        """All accounts owned by ``program_id`` matching the given filters.

        ``memcmp`` is a sequence of (offset, public key) pairs compared
        against the account bytes. Order of the result is whatever the node
        returns.
        """
        program = to_pubkey(program_id)
        filters: List[Union[int, MemcmpOpts]] = []
        if data_size is not None:
            filters.append(data_size)
        for offset, key in memcmp:
            filters.append(MemcmpOpts(offset=offset, bytes=str(to_pubkey(key))))

        logger.debug(f"Fetching program accounts for {program} with {len(filters)} filters")
        try:
            resp = await asyncio.wait_for(
                self.client.get_program_accounts(
                    program, commitment=self.commitment, encoding="base64", filters=filters or None
                ),
                timeout=self.timeout,
            )
        except _TRANSPORT_ERRORS as e:
            logger.error(f"RPC getProgramAccounts failed for {program}: {e}")
            raise ConnectivityError(f"getProgramAccounts failed via {self.endpoint}: {e}", str(program)) from e

        accounts = [RawAccount.from_rpc(keyed.pubkey, keyed.account) for keyed in (resp.value or [])]
        logger.info(f"Program {program} returned {len(accounts)} accounts")
        return accounts
