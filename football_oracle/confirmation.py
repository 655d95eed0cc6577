"""
Confirmation Notifier

Remembers who is waiting for which fact and tells each of them once the unit
carrying the fact becomes stable.
"""

from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

FEED_NAMES_BY_UNITS_SQL = "SELECT feed_name FROM data_feeds WHERE unit IN :units"


class StabilityWaiterRegistry:
    """
    Requesters waiting for submitted facts to become stable.

    Entries are keyed by fact key. A published payload may name the fact
    under a different feed name, so feed names are indexed back to the key.
    """

    def __init__(self):
        self._waiters: Dict[str, List[str]] = {}
        self._fact_keys_by_feed: Dict[str, str] = {}

    def __contains__(self, fact_key: str) -> bool:
        return fact_key in self._waiters

    def __len__(self) -> int:
        return len(self._waiters)

    def add_waiter(self, fact_key: str, requester: str) -> None:
        self.add_waiters(fact_key, [requester])

    def add_waiters(self, fact_key: str, requesters: Iterable[str], feed_names: Iterable[str] = ()) -> None:
        """Append requesters to the entry for fact_key, creating it if needed."""
        waiters = self._waiters.setdefault(fact_key, [])
        waiters.extend(r for r in requesters if r)
        self._fact_keys_by_feed[fact_key] = fact_key
        for feed_name in feed_names:
            self._fact_keys_by_feed[feed_name] = fact_key

    def waiters_for(self, fact_key: str) -> List[str]:
        return list(self._waiters.get(fact_key, []))

    def fact_key_for(self, feed_name: str) -> str:
        return self._fact_keys_by_feed.get(feed_name, feed_name)

    def pop_for_feed(self, feed_name: str) -> Optional[Tuple[str, List[str]]]:
        """Remove and return (fact_key, distinct waiters) for a confirmed feed."""
        fact_key = self.fact_key_for(feed_name)
        waiters = self._waiters.pop(fact_key, None)
        if waiters is None:
            return None
        for alias in [k for k, v in self._fact_keys_by_feed.items() if v == fact_key]:
            del self._fact_keys_by_feed[alias]
        return fact_key, list(dict.fromkeys(waiters))


class ConfirmationNotifier:
    """Fans out completion notices when the oracle's units become stable."""

    def __init__(
        self,
        storage,
        registry: StabilityWaiterRegistry,
        on_fact_confirmed: Callable[[str, str], Awaitable[None]],
    ):
        """
        Args:
            storage: LedgerStorage used to map units to feed names
            registry: waiter registry owned by this notifier
            on_fact_confirmed: coroutine called once per (fact_key, requester)
        """
        self.storage = storage
        self.registry = registry
        self.on_fact_confirmed = on_fact_confirmed

    async def on_units_stable(self, units: List[str]) -> int:
        """
        Handle a batch of the oracle's units that became stable.

        Returns:
            Number of notices delivered
        """
        if not units:
            return 0

        rows = await self.storage.query(FEED_NAMES_BY_UNITS_SQL, {"units": list(units)}, expanding=("units",))

        # claim all matching entries before the first notice suspends
        confirmed = []
        for row in rows:
            entry = self.registry.pop_for_feed(row["feed_name"])
            if entry is not None:
                confirmed.append(entry)

        sent = 0
        for fact_key, waiters in confirmed:
            print(f"[NOTIFY] {fact_key} is stable, notifying {len(waiters)} requester(s)")
            for requester in waiters:
                try:
                    await self.on_fact_confirmed(fact_key, requester)
                except Exception as e:
                    print(f"[NOTIFY] ✗ Failed to notify {requester} about {fact_key}: {e}")
                    continue
                sent += 1
        return sent
