"""Client wrappers for the ledger and the oracle feeds."""

from .ledger import AmountConverter, LedgerClient, Web3LedgerClient
from .oracle import OracleClient

__all__ = ["AmountConverter", "LedgerClient", "Web3LedgerClient", "OracleClient"]
