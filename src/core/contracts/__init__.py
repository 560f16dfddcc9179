"""
Contract Validation Module

Модуль для валидации JSON контрактов auction-match.
"""

from .validators import (
    AuctionConfigValidator,
    ContractValidator,
    SchemaLoader,
    get_schema_loader,
    validate_auction_config,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "AuctionConfigValidator",
    # Functions
    "get_schema_loader",
    "validate_auction_config",
]
