"""On-chain settlement: contract call parameters only."""

from whispermarket.chain.contracts import (
    PREDICTION_MARKET_ABI,
    ContractCall,
    ContractCallBuilder,
    parse_ether,
    visibility_code,
)

__all__ = [
    "PREDICTION_MARKET_ABI",
    "ContractCall",
    "ContractCallBuilder",
    "parse_ether",
    "visibility_code",
]
