"""
Runtime configuration loaded from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

RPC_ENDPOINT = os.getenv('RPC_ENDPOINT', 'https://api.mainnet-beta.solana.com')
RPC_COMMITMENT = os.getenv('RPC_COMMITMENT', 'confirmed')
RPC_TIMEOUT = float(os.getenv('RPC_TIMEOUT', '10'))  # seconds
MAX_CONCURRENT_FETCHES = int(os.getenv('MAX_CONCURRENT_FETCHES', '8'))

DEXSCREENER_URL = os.getenv('DEXSCREENER_URL', 'https://api.dexscreener.com')
HELIUS_API_URL = os.getenv('HELIUS_API_URL', 'https://api.helius.xyz')
HELIUS_API_KEY = os.getenv('HELIUS_API_KEY', '')
HTTP_TIMEOUT = float(os.getenv('HTTP_TIMEOUT', '10'))  # seconds

LOGGING_CONFIG = {
    'message_log_file': os.getenv('LOG_FILE', 'logs/raydium_pools.log'),
    'max_log_size_mb': int(os.getenv('MAX_LOG_SIZE_MB', '10')),
    'backup_count': int(os.getenv('LOG_BACKUP_COUNT', '5')),
    'level': os.getenv('LOG_LEVEL', 'INFO'),
}


@dataclass
class FetchConfig:
    """Connection settings for account fetching."""
    endpoint: str = field(default_factory=lambda: os.getenv('RPC_ENDPOINT', RPC_ENDPOINT))
    commitment: str = field(default_factory=lambda: os.getenv('RPC_COMMITMENT', RPC_COMMITMENT))
    timeout: float = field(default_factory=lambda: float(os.getenv('RPC_TIMEOUT', str(RPC_TIMEOUT))))
    max_concurrency: int = field(
        default_factory=lambda: int(os.getenv('MAX_CONCURRENT_FETCHES', str(MAX_CONCURRENT_FETCHES)))
    )

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
