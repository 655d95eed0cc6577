"""
Resource Pool Manager

Keeps the oracle address from running out of spendable outputs. Every
publication consumes one stable output; when the number of payable units
drops to the threshold, the biggest output is split in two by paying half of
it back to ourselves.
"""

from typing import List, Optional

from .models import OutputSpec, ResourcePoolSnapshot, SpendableOutput, round_half_up

COUNT_BIG_OUTPUTS_SQL = """
    SELECT COUNT(*) AS count_big_outputs FROM outputs JOIN units USING(unit)
    WHERE address=:address AND is_stable=1 AND amount>=:unit_cost AND asset IS NULL AND is_spent=0
"""

# UNION ALL: two sources with the same total must both be counted
SUM_SMALL_CREDITS_SQL = """
    SELECT SUM(amount) AS total FROM outputs JOIN units USING(unit)
    WHERE address=:address AND is_stable=1 AND amount<:unit_cost AND asset IS NULL AND is_spent=0
    UNION ALL
    SELECT SUM(amount) AS total FROM witnessing_outputs
    WHERE address=:address AND is_spent=0
    UNION ALL
    SELECT SUM(amount) AS total FROM headers_commission_outputs
    WHERE address=:address AND is_spent=0
"""

LARGEST_SPLITTABLE_OUTPUT_SQL = """
    SELECT amount, asset, is_stable, is_spent FROM outputs JOIN units USING(unit)
    WHERE address=:address AND is_stable=1 AND amount>=:min_amount AND asset IS NULL AND is_spent=0
    ORDER BY amount DESC LIMIT 1
"""


class PayableCountCache:
    """
    Optimistic count of publications the pool can still pay for.

    Each check consumes one unit. While the remaining count stays above the
    threshold it is trusted; otherwise it is stale and must be recomputed.
    """

    def __init__(self, threshold: int, initial: int = 0):
        self.threshold = threshold
        self.count = initial

    def consume(self) -> int:
        self.count -= 1
        return self.count

    @property
    def is_fresh(self) -> bool:
        return self.count > self.threshold

    def refresh(self, count: int) -> int:
        self.count = count
        return count


class ResourcePoolManager:
    """Sizes the outputs of each publication transaction."""

    def __init__(
        self,
        storage,
        notifier,
        oracle_address: str,
        unit_cost: int,
        min_available_outputs: int,
    ):
        """
        Args:
            storage: LedgerStorage used for output queries
            notifier: AdminNotifier for low-resource warnings
            oracle_address: the single address that pays for publications
            unit_cost: typical cost of one publication
            min_available_outputs: payable count at or below which outputs are split
        """
        self.storage = storage
        self.notifier = notifier
        self.oracle_address = oracle_address
        self.unit_cost = unit_cost
        self.min_available_outputs = min_available_outputs
        self.cache = PayableCountCache(threshold=min_available_outputs)

    async def snapshot(self) -> ResourcePoolSnapshot:
        """Read the current pool state from storage (no caching)."""
        params = {"address": self.oracle_address, "unit_cost": self.unit_cost}

        rows = await self.storage.query(COUNT_BIG_OUTPUTS_SQL, params)
        big_output_count = rows[0]["count_big_outputs"] if rows else 0

        rows = await self.storage.query(SUM_SMALL_CREDITS_SQL, params)
        total = sum(int(row["total"] or 0) for row in rows)

        return ResourcePoolSnapshot(
            big_output_count=big_output_count,
            small_output_credit_total=total,
            unit_cost=self.unit_cost,
        )

    async def compute_payable_output_count(self) -> int:
        """
        Number of publications the pool can pay for.

        Consumes one unit from the cached count; storage is only queried when
        the cache has dropped to the threshold.
        """
        self.cache.consume()
        if self.cache.is_fresh:
            return self.cache.count

        snapshot = await self.snapshot()
        count = self.cache.refresh(snapshot.payable_count)
        print(f"[POOL] Payable outputs: {count} "
              f"({snapshot.big_output_count} big, {snapshot.small_output_credit_total} in small outputs/credits)")
        return count

    async def find_largest_splittable_output(self) -> Optional[SpendableOutput]:
        """Biggest payable output worth splitting, if any."""
        rows = await self.storage.query(
            LARGEST_SPLITTABLE_OUTPUT_SQL,
            {"address": self.oracle_address, "min_amount": 2 * self.unit_cost},
        )
        if not rows:
            return None
        row = rows[0]
        return SpendableOutput(
            amount=row["amount"],
            asset=row["asset"],
            is_stable=bool(row["is_stable"]),
            is_spent=bool(row["is_spent"]),
        )

    async def plan_outputs_for_next_publication(self) -> List[OutputSpec]:
        """
        Outputs for the next publication transaction.

        Always pays 0 to ourselves so the change comes back to the oracle
        address. When running low, adds a second output worth half of the
        biggest output.
        """
        outputs = [OutputSpec(amount=0, address=self.oracle_address)]

        count = await self.compute_payable_output_count()
        if count > self.min_available_outputs:
            return outputs

        largest = await self.find_largest_splittable_output()
        if largest is None or not largest.is_payable:
            await self.notifier.notify_about_posting_problem(
                f"only {count} spendable outputs left, and can't add more"
            )
            return outputs

        print(f"[POOL] Only {count} spendable outputs left, splitting an output of {largest.amount}")
        outputs.append(OutputSpec(amount=round_half_up(largest.amount, 2), address=self.oracle_address))
        return outputs
