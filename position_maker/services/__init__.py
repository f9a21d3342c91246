"""Business logic services: contract snapshot, pricing, strategy, signing, dispatch."""

from .contract import MarketContractWrapper
from .dispatcher import Dispatcher
from .pricer import Pricer
from .sanity import SanityChecker
from .signer import build_order, order_hash, recover_signer, sign_order
from .strategy import MarketContractStrategy

__all__ = [
    "MarketContractWrapper",
    "Dispatcher",
    "Pricer",
    "SanityChecker",
    "build_order",
    "order_hash",
    "recover_signer",
    "sign_order",
    "MarketContractStrategy",
]
