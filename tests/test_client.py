import logging

import pytest

from ratedstats_roster.client import ArmoryClient
from ratedstats_roster.roster import Roster


@pytest.mark.asyncio
async def test_client_wires_one_builder_per_process(settings):
    async with ArmoryClient(settings) as client:
        roster = client.new_roster()
        assert isinstance(roster, Roster)
        assert roster.builder is client.builder
        assert client.builder.tokens is client.tokens
    assert client.session is None


def test_roster_requires_entered_client(settings):
    with pytest.raises(RuntimeError):
        ArmoryClient(settings).new_roster()


@pytest.mark.asyncio
async def test_request_metrics_are_logged_on_exit(settings, caplog):
    caplog.set_level(logging.DEBUG, logger="ratedstats_roster.client")
    async with ArmoryClient(settings) as client:
        client.fetcher.metrics["200"] = 3
        client.fetcher.metrics["404"] = 1

    assert "[FETCH] Request metrics:" in caplog.text
    assert "'200': 3" in caplog.text
    assert "'404': 1" in caplog.text
