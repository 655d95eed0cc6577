"""
Fact Oracle

Wires the resource pool, publish queue, resolver and confirmation notifier
around one oracle address and exposes the requester-facing operations.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from .config import OracleConfig
from .confirmation import ConfirmationNotifier, StabilityWaiterRegistry
from .errors import ConfigError
from .models import FactStatus, PendingPublication
from .notifications import AdminNotifier
from .publish_queue import PublishQueue
from .resolver import FactExistenceResolver
from .resource_pool import ResourcePoolManager
from .signing import OracleSigner
from .storage import LedgerStorage


class FactOracle:
    """Publishes each fact exactly once and tells requesters when it is stable."""

    def __init__(
        self,
        config: OracleConfig,
        storage: LedgerStorage,
        ledger,
        notifier: AdminNotifier = None,
        signer: Optional[OracleSigner] = None,
        on_fact_confirmed: Optional[Callable[[str, str], Awaitable[None]]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            config: oracle settings
            storage: ledger database access
            ledger: LedgerClient used to submit publications
            notifier: operator alerts (default: built from config)
            signer: key of the oracle address; supplies the address when
                config.oracle_address is empty
            on_fact_confirmed: coroutine called once per requester when a fact is stable
            sleep: coroutine used for retry delays
        """
        oracle_address = config.oracle_address or (signer.address if signer else "")
        if not oracle_address:
            raise ConfigError("oracle must be single address: set ORACLE_ADDRESS or ORACLE_PRIVATE_KEY")

        self.config = config
        self.oracle_address = oracle_address
        self.storage = storage
        self.notifier = notifier or AdminNotifier(
            admin_email=config.admin_email,
            from_email=config.from_email,
            smtp_host=config.smtp_host,
            smtp_port=config.smtp_port,
        )
        self.on_fact_confirmed = on_fact_confirmed

        self.registry = StabilityWaiterRegistry()
        self.resource_pool = ResourcePoolManager(
            storage=storage,
            notifier=self.notifier,
            oracle_address=oracle_address,
            unit_cost=config.unit_cost,
            min_available_outputs=config.min_available_outputs,
        )
        self.publish_queue = PublishQueue(
            resource_pool=self.resource_pool,
            ledger=ledger,
            registry=self.registry,
            notifier=self.notifier,
            oracle_address=oracle_address,
            signer=signer,
            retry_delay_seconds=config.retry_delay_seconds,
            retry_jitter_seconds=config.retry_jitter_seconds,
            post_timestamp=config.post_timestamp,
            sleep=sleep,
        )
        self.resolver = FactExistenceResolver(
            storage=storage,
            publish_queue=self.publish_queue,
            registry=self.registry,
            oracle_address=oracle_address,
        )
        self.confirmation_notifier = ConfirmationNotifier(
            storage=storage,
            registry=self.registry,
            on_fact_confirmed=self._fact_confirmed,
        )

    @classmethod
    def from_config(cls, config: OracleConfig, ledger, **kwargs) -> "FactOracle":
        """Build storage and signer from config."""
        signer = OracleSigner(config.private_key) if config.private_key else None
        storage = LedgerStorage(database_url=config.database_url)
        return cls(config, storage, ledger, signer=signer, **kwargs)

    async def _fact_confirmed(self, fact_key: str, requester: str) -> None:
        if self.on_fact_confirmed is None:
            print(f"[NOTIFY] {fact_key} confirmed for {requester} (no handler)")
            return
        await self.on_fact_confirmed(fact_key, requester)

    async def request_fact_publication(self, fact_key: str, value: Any, requester: Optional[str] = None) -> PendingPublication:
        """Publish ``{fact_key: value}`` unless it is already being published."""
        return self.publish_queue.enqueue(fact_key, {fact_key: value}, requester)

    async def resolve_fact_status(self, fact_key: str, requester: str) -> FactStatus:
        return await self.resolver.resolve(fact_key, requester)

    async def on_units_stable(self, units: List[str]) -> int:
        """Handler for the wallet's "my transactions became stable" event."""
        return await self.confirmation_notifier.on_units_stable(units)

    async def join(self) -> None:
        await self.publish_queue.join()
