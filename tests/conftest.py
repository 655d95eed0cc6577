"""
Shared fixtures: a temporary ledger database and in-memory ledger fakes.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from football_oracle.db import (
    DataFeed, HeadersCommissionOutput, Output, Unit, UnitAuthor, WitnessingOutput,
    get_session_maker, init_db,
)
from football_oracle.storage import LedgerStorage

ORACLE_ADDRESS = "ORACLEADDRESS0000000000000000000"
OTHER_ADDRESS = "SOMEONEELSE000000000000000000000"


class LedgerDB:
    """Helper that writes ledger rows the oracle reads."""

    def __init__(self, database_url):
        self.engine = init_db(database_url)
        self.Session = get_session_maker(database_url)
        self._next = 0

    def _unit_id(self):
        self._next += 1
        return f"unit-{self._next}"

    def add_unit(self, is_stable=True, author=ORACLE_ADDRESS, unit=None):
        unit = unit or self._unit_id()
        with self.Session() as session:
            session.add(Unit(unit=unit, is_stable=1 if is_stable else 0))
            session.add(UnitAuthor(unit=unit, address=author))
            session.commit()
        return unit

    def add_output(self, amount, is_stable=True, is_spent=False, asset=None, address=ORACLE_ADDRESS):
        unit = self.add_unit(is_stable=is_stable)
        with self.Session() as session:
            session.add(Output(unit=unit, address=address, amount=amount, asset=asset,
                               is_spent=1 if is_spent else 0))
            session.commit()
        return unit

    def add_witnessing_credit(self, amount, mci, is_spent=False, address=ORACLE_ADDRESS):
        with self.Session() as session:
            session.add(WitnessingOutput(main_chain_index=mci, address=address, amount=amount,
                                         is_spent=1 if is_spent else 0))
            session.commit()

    def add_commission_credit(self, amount, mci, is_spent=False, address=ORACLE_ADDRESS):
        with self.Session() as session:
            session.add(HeadersCommissionOutput(main_chain_index=mci, address=address, amount=amount,
                                                is_spent=1 if is_spent else 0))
            session.commit()

    def add_data_feed(self, feed_name, value, is_stable=False, author=ORACLE_ADDRESS, unit=None):
        unit = self.add_unit(is_stable=is_stable, author=author, unit=unit)
        with self.Session() as session:
            session.add(DataFeed(unit=unit, feed_name=feed_name, value=str(value)))
            session.commit()
        return unit

    def mark_stable(self, unit):
        with self.Session() as session:
            session.get(Unit, unit).is_stable = 1
            session.commit()


class FakeLedger:
    """
    In-memory LedgerClient.

    ``failures`` is a list of exceptions raised by successive submissions
    before they start succeeding. Accepted publications are written to the
    ledger database as unstable units when ``db`` is given.
    """

    def __init__(self, db=None, failures=None):
        self.db = db
        self.failures = list(failures or [])
        self.submissions = []
        self.accepted = []
        self.broadcasts = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def compose_and_submit(self, paying_addresses, outputs, messages, signer):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            self.submissions.append({
                "paying_addresses": paying_addresses,
                "outputs": list(outputs),
                "messages": messages,
                "signer": signer,
            })
            if self.failures:
                raise self.failures.pop(0)

            joint = {"unit": f"joint-{len(self.accepted) + 1}", "messages": messages}
            if self.db is not None:
                self.db.add_unit(is_stable=False, unit=joint["unit"])
                with self.db.Session() as session:
                    for name, value in messages[0]["payload"].items():
                        session.add(DataFeed(unit=joint["unit"], feed_name=name, value=str(value)))
                    session.commit()
            self.accepted.append(joint)
            return joint
        finally:
            self.in_flight -= 1

    async def broadcast(self, joint):
        self.broadcasts.append(joint)


class RecordingSleep:
    """Retry sleep that returns immediately and remembers the delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def ledger_db(tmp_path):
    return LedgerDB(f"sqlite:///{tmp_path / 'ledger.sqlite'}")


@pytest.fixture
def storage(ledger_db):
    return LedgerStorage(engine=ledger_db.engine)


@pytest.fixture
def notifier():
    return AsyncMock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()

