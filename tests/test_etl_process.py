import asyncio
from datetime import datetime, timezone

from core.etl.load import LoadError, LoadResult
from core.etl.models import RawJob
from core.etl.process import ALREADY_IN_PROGRESS, EtlProcess
from core.etl.snapshot import SnapshotStore
from core.etl.transform import transform_linkedin_jobs

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def _raw(n, **overrides):
    data = {
        "title": f"Dev {n}",
        "company": f"Empresa {n}",
        "link": f"https://br.linkedin.com/jobs/view/{n}",
        "location": "Sorocaba",
    }
    data.update(overrides)
    return RawJob(**data)


def _extract_returning(jobs):
    async def extract():
        return list(jobs)

    return extract


def _load_counting_all_as_created():
    async def load(records):
        return LoadResult(created=len(records), skipped=0)

    return load


def _process(extract, load=None, store=None):
    return EtlProcess(
        extract=extract,
        transform=transform_linkedin_jobs,
        load=load or _load_counting_all_as_created(),
        snapshot_store=store or SnapshotStore(),
        clock=lambda: FIXED_NOW,
    )


def test_successful_run_reports_counts_and_publishes_snapshot():
    store = SnapshotStore()
    jobs = [_raw(1), _raw(2, location=None), _raw(3, link="bad link")]
    process = _process(_extract_returning(jobs), store=store)

    result = asyncio.run(process.run_once())

    assert result.to_dict() == {"extracted": 3, "transformed": 2, "created": 2, "skipped": 0}
    snapshot = store.get()
    assert snapshot.retrieved_at == FIXED_NOW
    assert (snapshot.extracted, snapshot.transformed, snapshot.created) == (3, 2, 2)
    assert [p.region for p in snapshot.positions] == ["Sorocaba", "Não informada"]


def test_snapshot_to_dict_uses_api_field_names():
    store = SnapshotStore()
    asyncio.run(_process(_extract_returning([_raw(1)]), store=store).run_once())

    data = store.get().to_dict()

    assert data["retrievedAt"] == "2026-01-15T12:00:00.000+00:00"
    assert data["positions"][0]["companyName"] == "Empresa 1"


def test_failed_load_keeps_previous_snapshot_and_partial_counts():
    store = SnapshotStore()
    asyncio.run(_process(_extract_returning([_raw(1)]), store=store).run_once())
    previous = store.get()

    async def failing_load(records):
        raise LoadError("db down", created=1, skipped=0)

    result = asyncio.run(_process(_extract_returning([_raw(2), _raw(3)]), load=failing_load, store=store).run_once())

    assert result.error == "db down"
    assert (result.extracted, result.transformed, result.created, result.skipped) == (2, 2, 1, 0)
    assert store.get() is previous


def test_extract_exception_is_reported_not_raised():
    async def broken_extract():
        raise ValueError("parser exploded")

    store = SnapshotStore()
    result = asyncio.run(_process(broken_extract, store=store).run_once())

    assert result.error == "parser exploded"
    assert result.extracted == 0
    assert store.get() is None


def test_empty_extract_still_publishes_empty_snapshot():
    store = SnapshotStore()
    result = asyncio.run(_process(_extract_returning([]), store=store).run_once())

    assert result.error is None
    assert store.get().positions == ()


def test_concurrent_run_returns_already_in_progress():
    async def scenario():
        release = asyncio.Event()
        started = asyncio.Event()
        calls = {"extract": 0}

        async def slow_extract():
            calls["extract"] += 1
            started.set()
            await release.wait()
            return [_raw(1)]

        process = _process(slow_extract)
        first = asyncio.ensure_future(process.run_once())
        await started.wait()

        assert process.running
        second = await process.run_once()

        release.set()
        first_result = await first
        return first_result, second, calls["extract"], process.running

    first, second, extract_calls, still_running = asyncio.run(scenario())

    assert second.error == ALREADY_IN_PROGRESS
    assert (second.extracted, second.created) == (0, 0)
    assert first.error is None
    assert extract_calls == 1
    assert not still_running


def test_guard_released_after_failure():
    async def broken_extract():
        raise RuntimeError("boom")

    process = _process(broken_extract)
    asyncio.run(process.run_once())

    assert not process.running
    result = asyncio.run(process.run_once())
    assert result.error == "boom"


def test_lookup_failure_mid_batch_with_real_loader():
    from functools import partial

    from core.etl.load import load_open_positions

    class FlakyStore:
        def __init__(self):
            self.lookups = 0

        def get_open_position_by_link(self, link):
            self.lookups += 1
            if self.lookups == 2:
                raise ConnectionError("server closed the connection unexpectedly")
            return None

        def create_open_position(self, record):
            return record.model_dump()

    store = SnapshotStore()
    process = _process(
        _extract_returning([_raw(1), _raw(2), _raw(3)]),
        load=partial(load_open_positions, store=FlakyStore()),
        store=store,
    )

    result = asyncio.run(process.run_once())

    assert result.error == "server closed the connection unexpectedly"
    assert (result.extracted, result.transformed, result.created, result.skipped) == (3, 3, 1, 0)
    assert store.get() is None
