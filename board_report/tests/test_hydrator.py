"""Tests for batched hydration."""

import asyncio
import json

import httpx
import pytest

from board_report.clients.monday import MondayClient, MondayError
from board_report.utils.hydrator import BatchHydrator, chunk_ids, flatten_items

from .fakes import FakeMonday, formula, graphql_error, item, status


def test_chunk_ids_splits_in_order():
    ids = [str(i) for i in range(250)]
    chunks = chunk_ids(ids, 100)
    assert [len(c) for c in chunks] == [100, 100, 50]
    assert [i for c in chunks for i in c] == ids


def test_chunk_ids_rejects_bad_size():
    with pytest.raises(ValueError):
        chunk_ids(["1"], 0)


def test_hydrates_in_batches_of_100(client, fake):
    ids = [str(i) for i in range(1, 251)]
    fake.add_items(*(item(i, f"Item {i}", status("status6", "B2C")) for i in ids))

    records = asyncio.run(BatchHydrator(client).hydrate(ids, ["status6"]))

    assert [r.id for r in records] == ids
    assert [len(r["variables"]["ids"]) for r in fake.detail_requests] == [100, 100, 50]
    assert all(r["variables"]["columns"] == ["status6"] for r in fake.detail_requests)


def test_empty_ids_make_no_request(client, fake):
    assert asyncio.run(BatchHydrator(client).hydrate([], ["status6"])) == []
    assert fake.requests == []


def test_batch_order_is_kept_and_concurrency_bounded():
    ids = [str(i) for i in range(1, 13)]
    raw_items = {i: item(i, f"Item {i}") for i in ids}
    state = {"in_flight": 0, "peak": 0}

    async def handler(request: httpx.Request) -> httpx.Response:
        batch = json.loads(request.content)["variables"]["ids"]
        state["in_flight"] += 1
        state["peak"] = max(state["peak"], state["in_flight"])
        # Later batches finish first
        await asyncio.sleep(0.01 * (len(ids) - int(batch[0])))
        state["in_flight"] -= 1
        return httpx.Response(200, json={"data": {"items": [raw_items[i] for i in batch]}})

    client = MondayClient(api_key="k", transport=httpx.MockTransport(handler))
    hydrator = BatchHydrator(client, batch_size=2, max_concurrent=3)

    records = asyncio.run(hydrator.hydrate(ids, ["status6"]))

    assert [r.id for r in records] == ids
    assert 1 < state["peak"] <= 3


def test_subitems_follow_their_parent(client, fake):
    fake.add_items(
        item("1", "Parent", status("status6", "B2B"), subitems=[
            item("1a", "Sub A", status("status6", "B2C")),
            item("1b", "Sub B"),
        ]),
        item("2", "Other parent", subitems=[]),
    )
    hydrator = BatchHydrator(client, include_subitems=True)

    records = asyncio.run(hydrator.hydrate(["1", "2"], ["status6"]))

    assert [(r.id, r.parent_id) for r in records] == [
        ("1", None), ("1a", "1"), ("1b", "1"), ("2", None),
    ]
    assert records[1].values == {"status6": "B2C"}
    assert "subitems" in fake.detail_requests[0]["query"]


def test_flatten_items_without_subitems():
    records = flatten_items([item("1", "A", formula("f", "1,00"))])
    assert len(records) == 1
    assert records[0].values == {"f": "1,00"}


def test_failing_batch_raises(client, fake):
    fake.queue_errors(graphql_error("Internal server error", "INTERNAL_SERVER_ERROR"))

    with pytest.raises(MondayError):
        asyncio.run(BatchHydrator(client, batch_size=1).hydrate(["1", "2"], ["status6"]))


def test_failing_batch_cancels_the_others():
    in_flight = set()

    async def run():
        siblings_started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            batch = json.loads(request.content)["variables"]["ids"]
            if batch == ["1"]:
                await siblings_started.wait()
                return httpx.Response(200, json={"errors": [graphql_error("Boom", "INTERNAL_SERVER_ERROR")]})
            in_flight.add(batch[0])
            if len(in_flight) == 2:
                siblings_started.set()
            try:
                await asyncio.sleep(30)
            finally:
                in_flight.discard(batch[0])
            return httpx.Response(200, json={"data": {"items": []}})

        client = MondayClient(api_key="k", transport=httpx.MockTransport(handler))
        hydrator = BatchHydrator(client, batch_size=1, max_concurrent=3)
        with pytest.raises(MondayError):
            await hydrator.hydrate(["1", "2", "3"], ["status6"])
        return set(in_flight)

    assert asyncio.run(run()) == set()
