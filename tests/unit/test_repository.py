# Copyright (c) 2026 mtrrun Contributors. All Rights Reserved.
"""Unit tests for MetricMemCache."""

import pytest

from mtrrun.server.errors import AlreadyExistsError, NotFoundError
from mtrrun.server.models import Counter, Gauge


class TestGaugeStore:
    @pytest.mark.asyncio
    async def test_insert_and_select(self, repo):
        await repo.insert_gauge(Gauge("temp", 3.5))
        assert await repo.select_gauge_by_name("temp") == Gauge("temp", 3.5)

    @pytest.mark.asyncio
    async def test_select_missing(self, repo):
        with pytest.raises(NotFoundError) as exc_info:
            await repo.select_gauge_by_name("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_insert_existing_rejected(self, repo):
        await repo.insert_gauge(Gauge("temp", 1.0))
        with pytest.raises(AlreadyExistsError):
            await repo.insert_gauge(Gauge("temp", 2.0))
        assert (await repo.select_gauge_by_name("temp")).value == 1.0

    @pytest.mark.asyncio
    async def test_update(self, repo):
        await repo.insert_gauge(Gauge("temp", 1.0))
        await repo.update_gauge(Gauge("temp", 2.0))
        assert (await repo.select_gauge_by_name("temp")).value == 2.0

    @pytest.mark.asyncio
    async def test_update_missing(self, repo):
        with pytest.raises(NotFoundError):
            await repo.update_gauge(Gauge("temp", 2.0))

    @pytest.mark.asyncio
    async def test_delete(self, repo):
        await repo.insert_gauge(Gauge("temp", 1.0))
        await repo.delete_gauge("temp")
        with pytest.raises(NotFoundError):
            await repo.select_gauge_by_name("temp")
        with pytest.raises(NotFoundError):
            await repo.delete_gauge("temp")

    @pytest.mark.asyncio
    async def test_selected_copy_is_detached(self, repo):
        await repo.insert_gauge(Gauge("temp", 1.0))
        selected = await repo.select_gauge_by_name("temp")
        selected.value = 99.0
        assert (await repo.select_gauge_by_name("temp")).value == 1.0


class TestCounterStore:
    @pytest.mark.asyncio
    async def test_crud(self, repo):
        await repo.insert_counter(Counter("hits", 5))
        await repo.update_counter(Counter("hits", 12))
        assert (await repo.select_counter_by_name("hits")).value == 12
        await repo.delete_counter("hits")
        assert await repo.select_counters() == []

    @pytest.mark.asyncio
    async def test_insert_existing_rejected(self, repo):
        await repo.insert_counter(Counter("hits", 1))
        with pytest.raises(AlreadyExistsError):
            await repo.insert_counter(Counter("hits", 1))


class TestTypeIsolation:
    @pytest.mark.asyncio
    async def test_same_name_in_both_types(self, repo):
        await repo.insert_gauge(Gauge("x", 1.5))
        await repo.insert_counter(Counter("x", 2))
        assert (await repo.select_gauge_by_name("x")).value == 1.5
        assert (await repo.select_counter_by_name("x")).value == 2
        assert repo.stats() == {"gauge": 1, "counter": 1}

    @pytest.mark.asyncio
    async def test_select_all(self, repo):
        for i in range(3):
            await repo.insert_gauge(Gauge(f"g{i}", float(i)))
        await repo.insert_counter(Counter("c", 1))
        gauges = await repo.select_gauges()
        assert {g.name for g in gauges} == {"g0", "g1", "g2"}
        assert len(await repo.select_counters()) == 1
