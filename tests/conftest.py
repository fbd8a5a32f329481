import pytest

from raydium_pools.fetcher import AccountFetcher
from tests.helpers import FakeRpcClient


@pytest.fixture
def make_fetcher():
    def _make(accounts=None, **kwargs):
        client = FakeRpcClient(accounts, **kwargs)
        return AccountFetcher("http://localhost:8899", "confirmed", 5, client=client), client
    return _make
