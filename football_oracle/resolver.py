"""
Fact Existence Resolver

Answers "is this fact already published?" without ever causing a second
publication. A requester who is told the fact exists but is not stable yet is
always registered for a completion notice.
"""

from typing import Any, Dict, Optional

from .errors import MalformedFactError
from .models import FactStatus

PUBLISHED_FEED_SQL = """
    SELECT feed_name, is_stable
    FROM data_feeds CROSS JOIN unit_authors USING(unit) CROSS JOIN units USING(unit)
    WHERE address=:address AND feed_name=:feed_name
"""


class FactExistenceResolver:
    """Checks the publish queue, then the ledger, for an existing fact."""

    def __init__(self, storage, publish_queue, registry, oracle_address: str):
        self.storage = storage
        self.publish_queue = publish_queue
        self.registry = registry
        self.oracle_address = oracle_address

    async def read_published(self, fact_key: str) -> Optional[Dict[str, Any]]:
        """Stored data feed row posted by the oracle under fact_key, if any."""
        rows = await self.storage.query(
            PUBLISHED_FEED_SQL,
            {"address": self.oracle_address, "feed_name": fact_key},
        )
        return rows[0] if rows else None

    async def resolve(self, fact_key: str, requester: str) -> FactStatus:
        if not fact_key:
            raise MalformedFactError("no feed name")

        if self.publish_queue.is_queued(fact_key):
            self.publish_queue.add_waiter(fact_key, requester)
            return FactStatus(exists=True, is_stable=False)

        row = await self.read_published(fact_key)
        if row is None:
            return FactStatus(exists=False)

        if not row["is_stable"]:
            self.registry.add_waiter(fact_key, requester)
            return FactStatus(exists=True, is_stable=False)

        return FactStatus(exists=True, is_stable=True)
