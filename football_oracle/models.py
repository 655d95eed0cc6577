"""
Data types shared by the publishing components.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def round_half_up(numerator: int, denominator: int) -> int:
    """Nearest integer to numerator / denominator, with halves rounded up."""
    return (2 * numerator + denominator) // (2 * denominator)


@dataclass
class SpendableOutput:
    """A value-bearing output owned by the oracle address."""
    amount: int
    asset: Optional[str] = None
    is_stable: bool = True
    is_spent: bool = False

    @property
    def is_payable(self) -> bool:
        """Only stable, unspent outputs in the base asset can pay for a publication."""
        return self.asset is None and self.is_stable and not self.is_spent


@dataclass(frozen=True)
class ResourcePoolSnapshot:
    """Point-in-time view of how many publications the pool can pay for."""
    big_output_count: int
    small_output_credit_total: int
    unit_cost: int

    @property
    def payable_count(self) -> int:
        return self.big_output_count + round_half_up(self.small_output_credit_total, self.unit_cost)


@dataclass(frozen=True)
class OutputSpec:
    """One output of a ledger transaction."""
    amount: int
    address: str

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "address": self.address}


@dataclass(frozen=True)
class FactStatus:
    """Whether a fact is already published and, if so, whether it is stable."""
    exists: bool
    is_stable: bool = False


class PublishState(Enum):
    """Lifecycle of a fact inside the publish queue."""
    UNQUEUED = "unqueued"
    QUEUED = "queued"
    SUBMITTING = "submitting"
    RETRY_SCHEDULED = "retry_scheduled"
    SUBMITTED = "submitted"


@dataclass
class PendingPublication:
    """A fact queued for publishing and the requesters waiting on it."""
    fact_key: str
    payload: Dict[str, Any]
    waiters: List[str] = field(default_factory=list)
    state: PublishState = PublishState.QUEUED
    attempts: int = 0

    def add_waiter(self, requester: Optional[str]) -> None:
        if requester and requester not in self.waiters:
            self.waiters.append(requester)
