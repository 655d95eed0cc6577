"""
End-to-end tests: request, publish once, confirm, notify.
"""

import asyncio

import pytest

from conftest import ORACLE_ADDRESS, FakeLedger
from football_oracle.config import OracleConfig
from football_oracle.errors import ConfigError, SubmissionError
from football_oracle.models import FactStatus
from football_oracle.oracle import FactOracle
from football_oracle.signing import OracleSigner

FEED = "_CHELSEA_ARSENAL_01-05-2017"
TEST_PRIVATE_KEY = "0x" + "11" * 32


def make_config(**overrides):
    settings = dict(
        oracle_address=ORACLE_ADDRESS,
        unit_cost=600,
        min_available_outputs=2,
        retry_delay_seconds=0,
        retry_jitter_seconds=0,
    )
    settings.update(overrides)
    return OracleConfig(**settings)


@pytest.fixture
def healthy_pool(ledger_db):
    for _ in range(10):
        ledger_db.add_output(10000)


def make_oracle(storage, ledger, notifier, sleep, notices, **config):
    async def on_fact_confirmed(fact_key, requester):
        notices.append((fact_key, requester))

    return FactOracle(
        make_config(**config), storage, ledger,
        notifier=notifier, on_fact_confirmed=on_fact_confirmed, sleep=sleep,
    )


def test_published_fact_notifies_requester_once(healthy_pool, ledger_db, storage, notifier, recording_sleep):
    ledger = FakeLedger(db=ledger_db)
    notices = []
    oracle = make_oracle(storage, ledger, notifier, recording_sleep, notices)
    payload = {"_TEAMA_TEAMB_01-01-2025": "TEAMA"}

    async def scenario():
        oracle.publish_queue.enqueue("TEAMA_TEAMB_01-01-2025", payload, "deviceX")
        await oracle.join()
        unit = ledger.accepted[0]["unit"]
        ledger_db.mark_stable(unit)
        await oracle.on_units_stable([unit])
        await oracle.on_units_stable([unit])

    asyncio.run(scenario())

    assert len(ledger.submissions) == 1
    assert ledger.submissions[0]["messages"][0]["payload"] == payload
    assert ledger.submissions[0]["outputs"][0].address == ORACLE_ADDRESS
    assert notices == [("TEAMA_TEAMB_01-01-2025", "deviceX")]


def test_every_requester_is_notified_and_nothing_is_published_twice(
    healthy_pool, ledger_db, storage, notifier, recording_sleep
):
    ledger = FakeLedger(db=ledger_db, failures=[SubmissionError("network down")])
    notices = []
    oracle = make_oracle(storage, ledger, notifier, recording_sleep, notices)

    async def scenario():
        assert await oracle.resolve_fact_status(FEED, "r1") == FactStatus(exists=False)
        await oracle.request_fact_publication(FEED, "ARSENAL", "r1")

        # queued: joins the pending publication
        assert await oracle.resolve_fact_status(FEED, "r2") == FactStatus(exists=True, is_stable=False)
        await oracle.join()

        # submitted but unstable: registered for the stability notice
        assert await oracle.resolve_fact_status(FEED, "r3") == FactStatus(exists=True, is_stable=False)

        unit = ledger.accepted[0]["unit"]
        ledger_db.mark_stable(unit)
        sent = await oracle.on_units_stable([unit])

        # stable: nothing more to wait for, nothing to publish
        assert await oracle.resolve_fact_status(FEED, "r4") == FactStatus(exists=True, is_stable=True)
        return sent

    sent = asyncio.run(scenario())

    assert sent == 3
    assert notices == [(FEED, "r1"), (FEED, "r2"), (FEED, "r3")]
    assert len(ledger.accepted) == 1
    assert len(ledger.submissions) == 2
    assert len(oracle.registry) == 0
    notifier.notify_about_failed_posting.assert_awaited_once()


def test_low_pool_splits_biggest_output(ledger_db, storage, notifier, recording_sleep):
    ledger_db.add_output(9000)
    ledger = FakeLedger(db=ledger_db)
    oracle = make_oracle(storage, ledger, notifier, recording_sleep, [])

    async def scenario():
        await oracle.request_fact_publication(FEED, "ARSENAL", "r1")
        await oracle.join()

    asyncio.run(scenario())

    outputs = ledger.submissions[0]["outputs"]
    assert [o.amount for o in outputs] == [0, 4500]
    assert {o.address for o in outputs} == {ORACLE_ADDRESS}


def test_address_comes_from_signer_when_not_configured(storage, notifier):
    signer = OracleSigner(TEST_PRIVATE_KEY)
    oracle = FactOracle(make_config(oracle_address=""), storage, FakeLedger(), notifier=notifier, signer=signer)

    assert oracle.oracle_address == signer.address
    assert oracle.publish_queue.signer is signer
    assert oracle.resource_pool.oracle_address == signer.address


def test_oracle_requires_an_address(storage, notifier):
    with pytest.raises(ConfigError):
        FactOracle(make_config(oracle_address=""), storage, FakeLedger(), notifier=notifier)
