import asyncio

import pytest

from database import InvalidOperation
from database.errors import INTEGRITY_ERRORS
from models import (
    Reaction,
    cast_vote,
    counter_drift,
    create_profile,
    get_post,
    get_topic,
    get_vote,
    has_liked,
    has_viewed,
    record_view,
    toggle_like,
    unview,
)
from models.counters import atomic_add
from models.profiles import get_profile

from .conftest import AUTHOR, OTHER, READER


async def test_like_pair_is_unique(db, topic):
    """
    같은 (userid, postid) 좋아요 두 번째 INSERT 는 실패, 지운 뒤에는 다시 가능.
    """
    sql = f"INSERT INTO `{db.t.likes}` (`userid`, `postid`, `post_userid`) VALUES (:u, :p, :a)"
    values = {"u": READER, "p": topic["first_postid"], "a": AUTHOR}
    await db.execute(sql, values)
    with pytest.raises(INTEGRITY_ERRORS):
        await db.execute(sql, values)
    await db.execute(
        f"DELETE FROM `{db.t.likes}` WHERE `userid` = :u AND `postid` = :p",
        {"u": READER, "p": topic["first_postid"]},
    )
    await db.execute(sql, values)


async def test_toggle_like_round_trip(db, topic):
    postid = topic["first_postid"]
    assert await toggle_like(db, postid, READER) is True
    assert await has_liked(db, postid, READER)
    assert (await get_post(db, postid))["likes"] == 1
    assert (await get_profile(db, AUTHOR))["like"] == 1

    assert await toggle_like(db, postid, READER) is False
    assert not await has_liked(db, postid, READER)
    assert (await get_post(db, postid))["likes"] == 0
    assert (await get_profile(db, AUTHOR))["like"] == 0
    assert await counter_drift(db) == []


async def test_concurrent_toggles_converge(db, topic):
    """한 사용자의 동시 토글 두 번 → 원래 상태"""
    postid = topic["first_postid"]
    results = await asyncio.gather(
        toggle_like(db, postid, READER),
        toggle_like(db, postid, READER),
    )
    assert sorted(results) == [False, True]
    assert not await has_liked(db, postid, READER)
    assert (await get_post(db, postid))["likes"] == 0


async def test_vote_add_cancel_flip(db, topic):
    postid, tid = topic["first_postid"], topic["topicid"]

    assert await cast_vote(db, postid, READER, Reaction.UP) == 1
    assert (await get_post(db, postid))["votes"] == 1

    # 반대 방향 → 전환, 합계는 2 만큼 이동
    assert await cast_vote(db, postid, READER, Reaction.DOWN) == -1
    assert await get_vote(db, postid, READER) == -1
    assert (await get_post(db, postid))["votes"] == -1
    assert (await get_topic(db, tid))["votes"] == -1

    # 같은 방향 다시 → 취소
    assert await cast_vote(db, postid, READER, Reaction.DOWN) is None
    assert await get_vote(db, postid, READER) is None
    assert (await get_post(db, postid))["votes"] == 0
    assert (await get_topic(db, tid))["votes"] == 0
    assert await counter_drift(db) == []


async def test_invalid_reaction(db, topic):
    with pytest.raises(InvalidOperation):
        await cast_vote(db, topic["first_postid"], READER, 5)


async def test_concurrent_votes_are_counted_exactly(db, users, topic):
    """
    N 명이 동시에 추천 → votes == N
    """
    n = 10
    voters = list(range(100, 100 + n))
    for userid in voters:
        await create_profile(db, userid, f"voter{userid}", users["groupid"])

    postid = topic["first_postid"]
    await asyncio.gather(*(cast_vote(db, postid, userid, Reaction.UP) for userid in voters))

    assert (await get_post(db, postid))["votes"] == n
    assert (await get_topic(db, topic["topicid"]))["votes"] == n
    assert await counter_drift(db) == []


async def test_views(db, topic):
    tid = topic["topicid"]
    assert await record_view(db, tid, READER) is True
    assert await record_view(db, tid, READER) is False
    assert await record_view(db, tid) is False
    assert await record_view(db, tid, OTHER) is True
    assert (await get_topic(db, tid))["views"] == 4
    assert await has_viewed(db, tid, READER)

    await unview(db, tid, READER)
    assert not await has_viewed(db, tid, READER)
    assert (await get_topic(db, tid))["views"] == 4
    assert await record_view(db, tid, READER) is True


async def test_vote_cancelled_between_insert_and_read(db, topic, monkeypatch):
    """
    INSERT 가 중복으로 실패한 뒤 다른 세션이 투표를 취소해 행이 사라졌으면 새 투표로 처리한다.
    """
    postid = topic["first_postid"]
    assert await cast_vote(db, postid, READER, Reaction.UP) == Reaction.UP

    original = db.fetch_val

    async def cancelled_meanwhile(query, values=None):
        monkeypatch.setattr(db, "fetch_val", original)
        await db.execute(
            f"DELETE FROM `{db.t.votes}` WHERE `userid` = :userid AND `postid` = :postid",
            {"userid": READER, "postid": postid},
        )
        await atomic_add(db, "posts", "votes", "postid", postid, -1, floor=False)
        await atomic_add(db, "topics", "votes", "topicid", topic["topicid"], -1, floor=False)
        return await original(query, values)

    monkeypatch.setattr(db, "fetch_val", cancelled_meanwhile)
    assert await cast_vote(db, postid, READER, Reaction.UP) == Reaction.UP

    assert await get_vote(db, postid, READER) == Reaction.UP
    assert (await get_post(db, postid))["votes"] == 1
    assert (await get_topic(db, topic["topicid"]))["votes"] == 1
    assert await counter_drift(db) == []
