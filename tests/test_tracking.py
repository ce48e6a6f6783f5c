import pytest

from database import InvalidOperation
from models import (
    ActivityType,
    ItemType,
    add_activity,
    list_activity,
    mark_activity_read,
    online_visitors,
    prune_visits,
    track_visit,
    unread_activity,
)

from .conftest import AUTHOR, READER


async def test_visit_tracking_dedupes(db):
    assert await track_visit(db, READER, "reader", "10.0.0.1", forumid=1, topicid=5, time=1000) is True
    assert await track_visit(db, READER, "reader2", "10.0.0.1", forumid=1, topicid=5, time=1100) is False
    assert await track_visit(db, 0, "guest", "10.0.0.2", forumid=1, time=1050) is True

    rows = await online_visitors(db, window=240, now=1200)
    assert len(rows) == 2
    assert rows[0]["name"] == "reader2"
    assert rows[0]["time"] == 1100

    assert len(await online_visitors(db, window=240, topicid=5, now=1200)) == 1
    assert len(await online_visitors(db, window=120, now=1200)) == 1

    await prune_visits(db, window=120, now=1200)
    assert [r["userid"] for r in await online_visitors(db, window=10_000, now=1200)] == [READER]


async def test_activity_feed(db):
    first = await add_activity(db, ActivityType.NEW_REPLY, 7, ItemType.POST, userid=AUTHOR,
                               itemid_second=3, name="reader", content="hi", date=100)
    second = await add_activity(db, "new_like", 7, "post", userid=AUTHOR, date=200)
    await add_activity(db, ActivityType.NEW_REPLY, 7, ItemType.POST, userid=READER, date=300)

    replies = await list_activity(db, ActivityType.NEW_REPLY, 7, ItemType.POST)
    assert len(replies) == 2
    assert [a["id"] for a in await list_activity(db, "new_reply", 7, "post", userid=AUTHOR)] == [first]

    unread = await unread_activity(db, ItemType.POST, AUTHOR)
    assert [a["id"] for a in unread] == [second, first]

    await mark_activity_read(db, AUTHOR, first)
    assert [a["id"] for a in await unread_activity(db, ItemType.POST, AUTHOR)] == [second]
    await mark_activity_read(db, AUTHOR)
    assert await unread_activity(db, ItemType.POST, AUTHOR) == []
    assert len(await unread_activity(db, ItemType.POST, READER)) == 1

    with pytest.raises(InvalidOperation):
        await add_activity(db, "new_poke", 1, ItemType.POST)
    with pytest.raises(InvalidOperation):
        await add_activity(db, ActivityType.NEW_LIKE, 1, "comment")
