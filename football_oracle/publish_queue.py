"""
Publish Queue

Holds the facts that are being published right now. There is never more than
one submission in flight per fact key: a second request for a queued fact only
adds its requester to the waiters. Failed submissions are retried after a
fixed delay plus jitter until they succeed, whatever the error.
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .errors import MalformedFactError
from .models import PendingPublication, PublishState
from .signing import create_payload_hash


def build_data_feed_message(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Single inline data feed message carrying the payload."""
    return {
        "app": "data_feed",
        "payload_location": "inline",
        "payload_hash": create_payload_hash(payload),
        "payload": payload,
    }


class PublishQueue:
    """Idempotent, retrying publisher of data feeds."""

    def __init__(
        self,
        resource_pool,
        ledger,
        registry,
        notifier,
        oracle_address: str,
        signer: Any = None,
        retry_delay_seconds: float = 300,
        retry_jitter_seconds: float = 3,
        post_timestamp: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            resource_pool: ResourcePoolManager sizing each transaction
            ledger: LedgerClient that composes and broadcasts
            registry: StabilityWaiterRegistry receiving waiters after submission
            notifier: AdminNotifier for failed attempts
            oracle_address: paying address (also the signing address)
            signer: signer object handed to the ledger client
            retry_delay_seconds: base delay before a retry
            retry_jitter_seconds: max random extra delay
            post_timestamp: add a ``timestamp`` field to every payload
            sleep: coroutine used for retry delays
        """
        self.resource_pool = resource_pool
        self.ledger = ledger
        self.registry = registry
        self.notifier = notifier
        self.oracle_address = oracle_address
        self.signer = signer if signer is not None else oracle_address
        self.retry_delay_seconds = retry_delay_seconds
        self.retry_jitter_seconds = retry_jitter_seconds
        self.post_timestamp = post_timestamp
        self._sleep = sleep
        self._pending: Dict[str, PendingPublication] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def __contains__(self, fact_key: str) -> bool:
        return fact_key in self._pending

    def is_queued(self, fact_key: str) -> bool:
        return fact_key in self._pending

    def get(self, fact_key: str) -> Optional[PendingPublication]:
        return self._pending.get(fact_key)

    def pending_keys(self) -> List[str]:
        return list(self._pending)

    def state_of(self, fact_key: str) -> PublishState:
        pending = self._pending.get(fact_key)
        return pending.state if pending else PublishState.UNQUEUED

    def add_waiter(self, fact_key: str, requester: str) -> None:
        self._pending[fact_key].add_waiter(requester)

    def enqueue(self, fact_key: str, payload: Dict[str, Any], requester: Optional[str] = None) -> PendingPublication:
        """
        Queue a fact for publishing, or join the existing publication.

        Must be called from a running event loop.

        Raises:
            MalformedFactError: empty fact key or payload
        """
        if not fact_key:
            raise MalformedFactError("no feed name")
        if not payload:
            raise MalformedFactError(f"empty payload for {fact_key}")

        pending = self._pending.get(fact_key)
        if pending is not None:
            pending.add_waiter(requester)
            print(f"[QUEUE] {fact_key} already queued")
            return pending

        pending = PendingPublication(fact_key=fact_key, payload=dict(payload))
        pending.add_waiter(requester)
        self._pending[fact_key] = pending

        task = asyncio.get_running_loop().create_task(self._publish(pending))
        self._tasks[fact_key] = task
        task.add_done_callback(lambda _t, key=fact_key: self._tasks.pop(key, None))
        return pending

    async def join(self) -> None:
        """Wait until every queued fact has been submitted."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()))

    def _retry_delay(self) -> float:
        return self.retry_delay_seconds + random.random() * self.retry_jitter_seconds

    async def _publish(self, pending: PendingPublication) -> None:
        while True:
            try:
                await self._submit(pending)
            except Exception as e:
                await self.notifier.notify_about_failed_posting(e)
                pending.state = PublishState.RETRY_SCHEDULED
                delay = self._retry_delay()
                print(f"[QUEUE] will retry posting {pending.fact_key} in {delay:.0f}s")
                await self._sleep(delay)
                continue

            pending.state = PublishState.SUBMITTED
            self.registry.add_waiters(pending.fact_key, pending.waiters, feed_names=pending.payload.keys())
            del self._pending[pending.fact_key]
            print(f"[QUEUE] ✓ Posted {pending.fact_key} (attempt {pending.attempts})")
            return

    async def _submit(self, pending: PendingPublication) -> Any:
        pending.state = PublishState.SUBMITTING
        pending.attempts += 1

        outputs = await self.resource_pool.plan_outputs_for_next_publication()

        payload = dict(pending.payload)
        if self.post_timestamp:
            payload["timestamp"] = int(time.time() * 1000)

        joint = await self.ledger.compose_and_submit(
            paying_addresses=[self.oracle_address],
            outputs=outputs,
            messages=[build_data_feed_message(payload)],
            signer=self.signer,
        )
        await self.ledger.broadcast(joint)
        return joint
