"""
Football Result Oracle

Publishes football match results as data feeds on the ledger for smart
contracts that settle on them:
1. Resolves whether a result is already published (or being published)
2. Publishes it exactly once, retrying failed submissions
3. Notifies every requester when the result becomes stable

Usage:
    football-oracle --pool          # Show spendable output pool
    football-oracle --feed <NAME>   # Show publication status of a feed
"""

from .config import OracleConfig
from .confirmation import ConfirmationNotifier, StabilityWaiterRegistry
from .errors import (
    OracleError,
    ConfigError,
    MalformedFactError,
    StorageReadError,
    SubmissionError,
    InsufficientFundsError,
)
from .models import (
    SpendableOutput,
    ResourcePoolSnapshot,
    OutputSpec,
    FactStatus,
    PublishState,
    PendingPublication,
)
from .oracle import FactOracle
from .publish_queue import PublishQueue
from .resolver import FactExistenceResolver
from .resource_pool import ResourcePoolManager, PayableCountCache

__version__ = "0.1.0"
__all__ = [
    "OracleConfig",
    "ConfirmationNotifier",
    "StabilityWaiterRegistry",
    "OracleError",
    "ConfigError",
    "MalformedFactError",
    "StorageReadError",
    "SubmissionError",
    "InsufficientFundsError",
    "SpendableOutput",
    "ResourcePoolSnapshot",
    "OutputSpec",
    "FactStatus",
    "PublishState",
    "PendingPublication",
    "FactOracle",
    "PublishQueue",
    "FactExistenceResolver",
    "ResourcePoolManager",
    "PayableCountCache",
]
