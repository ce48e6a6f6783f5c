import pytest

from database import InvalidOperation, NotFound
from models import ItemType, confirm_subscription, list_subscribers, subscribe, unsubscribe

from .conftest import OTHER, READER


async def test_subscribe_confirm_unsubscribe(db, forum, topic):
    sub = await subscribe(db, topic["topicid"], ItemType.TOPIC, READER, "reader", "reader@example.com")
    assert len(sub["confirmkey"]) == 32
    assert sub["active"] == 0
    assert await list_subscribers(db, topic["topicid"], ItemType.TOPIC) == []

    confirmed = await confirm_subscription(db, sub["confirmkey"])
    assert confirmed["active"] == 1
    subs = await list_subscribers(db, topic["topicid"], "topic")
    assert [s["userid"] for s in subs] == [READER]

    await unsubscribe(db, sub["confirmkey"])
    assert await list_subscribers(db, topic["topicid"], ItemType.TOPIC, active_only=False) == []
    with pytest.raises(NotFound):
        await unsubscribe(db, sub["confirmkey"])
    with pytest.raises(NotFound):
        await confirm_subscription(db, sub["confirmkey"])


async def test_duplicate_subscription_returns_existing(db, forum):
    first = await subscribe(db, forum, ItemType.FORUM, READER, "reader", "reader@example.com", active=True)
    again = await subscribe(db, forum, ItemType.FORUM, READER, "reader", "reader@example.com")
    assert again["subid"] == first["subid"]
    assert again["confirmkey"] == first["confirmkey"]

    other = await subscribe(db, forum, ItemType.FORUM, OTHER, "other", "other@example.com", active=True)
    assert other["confirmkey"] != first["confirmkey"]
    assert len(await list_subscribers(db, forum, ItemType.FORUM)) == 2


async def test_subscription_targets(db, forum):
    with pytest.raises(InvalidOperation):
        await subscribe(db, 1, ItemType.POST, READER, "reader", "r@example.com")
    with pytest.raises(InvalidOperation):
        await subscribe(db, 1, "board", READER, "reader", "r@example.com")
    with pytest.raises(NotFound):
        await subscribe(db, 404, ItemType.TOPIC, READER, "reader", "r@example.com")
