# Arbitrage strategies
from .simple_arb import SimpleArb, TokenEntry, DEFAULT_TOKEN_LIST

__all__ = ["SimpleArb", "TokenEntry", "DEFAULT_TOKEN_LIST"]
