"""Tests for per-topic writer serialization."""

import asyncio

import pytest

from topicbox.services.topic_locks import TopicLocks


@pytest.mark.asyncio
async def test_same_topic_is_serialized():
    locks = TopicLocks()
    events = []

    async def writer(name: str):
        async with locks.hold("topic-1"):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(writer("a"), writer("b"))

    assert events in (
        ["a:start", "a:end", "b:start", "b:end"],
        ["b:start", "b:end", "a:start", "a:end"],
    )


@pytest.mark.asyncio
async def test_different_topics_run_concurrently():
    locks = TopicLocks()
    inside = asyncio.Event()

    async def first():
        async with locks.hold("topic-1"):
            # Completes only if the other topic's holder can enter meanwhile
            await asyncio.wait_for(inside.wait(), timeout=1)

    async def second():
        async with locks.hold("topic-2"):
            inside.set()

    await asyncio.gather(first(), second())


@pytest.mark.asyncio
async def test_registry_drops_unused_locks():
    locks = TopicLocks()

    async with locks.hold("topic-1"):
        assert len(locks) == 1

    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_released_when_body_raises():
    locks = TopicLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("topic-1"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold("topic-1"):
        pass
