"""
Chat front end: turns "team1 / team2" messages into published match results.
"""

import asyncio
from typing import Protocol

import requests

from .football import INSTRUCTION, FootballDataClient, find_fixture, parse_match_request

INSERT_RESPONSE_SQL = """
    INSERT INTO fd_responses (device_address, feed_name, response)
    VALUES (:device_address, :feed_name, :response)
"""

STABLE_SUFFIX = "\n\nThe data is already in the database, you can unlock your smart contract now."
PENDING_SUFFIX = (
    "\n\nThe data will be added into the database, "
    "I'll let you know when it is confirmed and you are able to unlock your contract."
)


class DeviceMessenger(Protocol):
    """Delivers text messages to paired devices."""

    async def send_message(self, device_address: str, text: str) -> None:
        ...


class OracleChatBot:
    """Handles chat events from paired devices."""

    def __init__(self, oracle, football_client: FootballDataClient, messenger: DeviceMessenger):
        self.oracle = oracle
        self.football = football_client
        self.messenger = messenger
        self.oracle.on_fact_confirmed = self.on_fact_confirmed

    async def on_paired(self, device_address: str) -> None:
        await self.messenger.send_message(device_address, INSTRUCTION)

    async def on_fact_confirmed(self, feed_name: str, device_address: str) -> None:
        await self.messenger.send_message(
            device_address,
            f"The data about your football {feed_name} is now in the database, you can unlock your contract.",
        )

    async def on_text(self, device_address: str, text: str) -> None:
        teams = parse_match_request(text)
        if teams is None:
            await self.messenger.send_message(device_address, INSTRUCTION)
            return

        try:
            fixtures, body = await asyncio.to_thread(self.football.fetch_recent_fixtures)
        except requests.RequestException as e:
            await self.oracle.notifier.notify_about_posting_problem(f"getting football data failed: {e}")
            await self.messenger.send_message(device_address, "Failed to fetch football data.")
            return

        fixture = find_fixture(fixtures, *teams)
        if fixture is None:
            await self.messenger.send_message(device_address, "Not found")
            return

        feed_name = fixture.feed_name
        print(f"[BOT] {device_address} asked for {feed_name}")
        await self.oracle.storage.execute(
            INSERT_RESPONSE_SQL,
            {"device_address": device_address, "feed_name": feed_name, "response": body},
        )

        status = await self.oracle.resolve_fact_status(feed_name, device_address)
        if not status.exists:
            await self.oracle.request_fact_publication(feed_name, fixture.outcome().upper(), device_address)

        message = fixture.describe() + (STABLE_SUFFIX if status.is_stable else PENDING_SUFFIX)
        await self.messenger.send_message(device_address, message)
