"""Repository layer tests for topicbox.

Tests focus on logic the services rely on:
- Deterministic listing order (created_at DESC, id ASC) across pages
- Counts that reflect the filter, not the page
- Unique constraints backing the uniqueness enforcer
- Bulk deletion by topic

Simple CRUD operations are not tested (trust SQLAlchemy/PostgreSQL).
"""

import pytest
from sqlalchemy.exc import IntegrityError

from topicbox.models.entry import UQ_TOPIC_WALLET, Entry
from topicbox.repositories.entry import EntryRepository
from topicbox.repositories.topic import TopicRepository

WALLETS = [
    "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
    "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
    "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
]


def entry_fields(index: int) -> dict:
    return {
        "telegram_username": f"@user{index}",
        "platform_username": f"user{index}",
        "wallet_address": f"0x{index:040x}",
        "email": f"user{index}@example.com",
    }


@pytest.mark.asyncio
async def test_entries_paginate_newest_first_with_total(session, make_topic, make_entry):
    """25 entries, limit 10: pages hold 10, 10, 5 and every page reports total 25."""
    topic = await make_topic()
    for i in range(25):
        await make_entry(topic, created_at=1_000 + i, **entry_fields(i))

    repo = EntryRepository(session)
    seen = []
    for offset in (0, 10, 20):
        entries, total = await repo.list_paginated(topic_id=topic.id, offset=offset, limit=10)
        assert total == 25
        seen.extend(entries)

    assert [len(seen[0:10]), len(seen[10:20]), len(seen[20:])] == [10, 10, 5]
    assert [e.created_at for e in seen] == sorted((1_000 + i for i in range(25)), reverse=True)
    assert len({e.id for e in seen}) == 25


@pytest.mark.asyncio
async def test_equal_timestamps_are_ordered_by_id(session, make_topic, make_entry):
    topic = await make_topic()
    for i in range(4):
        await make_entry(topic, created_at=5_000, **entry_fields(i))

    entries, _ = await EntryRepository(session).list_paginated(offset=0, limit=10)

    ids = [e.id for e in entries]
    assert ids == sorted(ids)


@pytest.mark.asyncio
async def test_topic_filter_counts_only_that_topic(session, make_topic, make_entry):
    first = await make_topic(name="First")
    second = await make_topic(name="Second")
    await make_entry(first, **entry_fields(1))
    await make_entry(second, **entry_fields(2))
    await make_entry(second, **entry_fields(3))

    repo = EntryRepository(session)
    entries, total = await repo.list_paginated(topic_id=second.id, offset=0, limit=10)
    assert total == 2
    assert {e.topic_id for e in entries} == {second.id}

    _, overall = await repo.list_paginated(offset=0, limit=1)
    assert overall == 3


@pytest.mark.asyncio
async def test_unique_constraint_rejects_duplicate_wallet(session, make_topic, make_entry):
    topic = await make_topic()
    await make_entry(topic, wallet_address=WALLETS[0])

    duplicate = Entry(
        topic_id=topic.id,
        topic_name=topic.name,
        telegram_username="@bob",
        platform_username="bob.dev",
        wallet_address=WALLETS[0],
        email="bob@example.com",
    )
    with pytest.raises(IntegrityError) as excinfo:
        await EntryRepository(session).add(duplicate)

    assert UQ_TOPIC_WALLET in str(excinfo.value.orig)
    await session.rollback()


@pytest.mark.asyncio
async def test_same_wallet_allowed_in_another_topic(session, make_topic, make_entry):
    first = await make_topic(name="First")
    second = await make_topic(name="Second")
    await make_entry(first, wallet_address=WALLETS[0])
    await make_entry(second, wallet_address=WALLETS[0])

    repo = EntryRepository(session)
    matches = await repo.list_outside_topic_matching(first.id, WALLETS[0], "nobody@example.com")
    assert [e.topic_id for e in matches] == [second.id]


@pytest.mark.asyncio
async def test_delete_by_topic_leaves_other_topics(session, make_topic, make_entry):
    doomed = await make_topic(name="Doomed")
    kept = await make_topic(name="Kept")
    await make_entry(doomed, **entry_fields(1))
    await make_entry(doomed, **entry_fields(2))
    await make_entry(kept, **entry_fields(3))

    repo = EntryRepository(session)
    removed = await repo.delete_by_topic(doomed.id)
    await session.commit()

    assert removed == 2
    assert await repo.list_by_topic(doomed.id) == []
    assert len(await repo.list_by_topic(kept.id)) == 1


@pytest.mark.asyncio
async def test_topics_active_filter(session, make_topic):
    await make_topic(name="Open", created_at=2_000)
    await make_topic(name="Closed", is_active=False, created_at=3_000)

    repo = TopicRepository(session)
    active, active_total = await repo.list_paginated(active_only=True)
    everything, total = await repo.list_paginated()

    assert [t.name for t in active] == ["Open"]
    assert active_total == 1
    assert [t.name for t in everything] == ["Closed", "Open"]
    assert total == 2


@pytest.mark.asyncio
async def test_topic_delete_reports_rowcount(session, make_topic):
    topic = await make_topic()
    repo = TopicRepository(session)

    assert await repo.delete(topic.id) == 1
    assert await repo.delete(topic.id) == 0
    await session.commit()
