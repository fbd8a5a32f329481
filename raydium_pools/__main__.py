import sys

from raydium_pools.cli import main

sys.exit(main())
