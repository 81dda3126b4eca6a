import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta

import pytest

from src.app.services.session_sweeper import SessionSweeper
from src.domain.base import utcnow


@pytest.mark.asyncio
async def test_run_once_sweeps(store, uow_factory, make_user, start_session):
    user = await make_user()
    session = await start_session(user.id)
    store.tables.sessions[session.id]["expires_at"] = utcnow() - timedelta(minutes=1)

    assert await SessionSweeper(uow_factory).run_once() == 1
    assert store.tables.sessions == {}


@pytest.mark.asyncio
async def test_start_runs_immediately_and_stop_cancels(
    store, uow_factory, make_user, start_session
):
    user = await make_user()
    session = await start_session(user.id)
    store.tables.sessions[session.id]["is_active"] = False

    sweeper = SessionSweeper(uow_factory, interval_seconds=3600)
    await sweeper.start()
    await asyncio.sleep(0.05)

    assert sweeper.running
    assert store.tables.sessions == {}

    await sweeper.stop()
    assert not sweeper.running


@pytest.mark.asyncio
async def test_failed_pass_does_not_stop_the_loop():
    calls = []

    @asynccontextmanager
    async def broken_factory():
        calls.append(1)
        raise RuntimeError("database unavailable")
        yield

    sweeper = SessionSweeper(broken_factory, interval_seconds=0.01)
    await sweeper.start()
    await asyncio.sleep(0.1)

    assert sweeper.running
    assert len(calls) > 1

    await sweeper.stop()


@pytest.mark.asyncio
async def test_start_twice_keeps_one_task(uow_factory):
    sweeper = SessionSweeper(uow_factory, interval_seconds=3600)
    await sweeper.start()
    task = sweeper._task

    await sweeper.start()

    assert sweeper._task is task
    await sweeper.stop()
