import pytest

from database import IntegrityDefect
from models import check_integrity, check_topic, get_first_post


@pytest.fixture
async def raw_rows(db):
    """엔진에 직접 넣은 행: Forum 1, Topic 10 (first_postid=100), Post 100"""
    await db.execute(
        f"INSERT INTO `{db.t.forums}` (`forumid`, `title`, `slug`) VALUES (1, 'General', 'general')"
    )
    await db.execute(
        f"""
        INSERT INTO `{db.t.topics}` (`topicid`, `forumid`, `first_postid`, `userid`, `title`, `slug`)
        VALUES (10, 1, 100, 1, 'Welcome', 'welcome')
        """
    )
    await db.execute(
        f"""
        INSERT INTO `{db.t.posts}` (`postid`, `topicid`, `forumid`, `userid`, `title`, `body`, `is_first_post`)
        VALUES (100, 10, 1, 1, 'Welcome', 'hi', 1)
        """
    )


async def test_first_post_lookup(db, raw_rows):
    post = await get_first_post(db, 10)
    assert post["postid"] == 100
    assert post["is_first_post"] == 1
    assert post["forumid"] == 1
    assert await check_topic(db, 10) == []
    assert await check_integrity(db) == []


async def test_forum_mismatch_is_reported_not_rejected(db, raw_rows):
    """
    엔진은 forumid 불일치를 받아들이고, 검사 함수가 보고한다.
    """
    await db.execute(f"UPDATE `{db.t.posts}` SET `forumid` = 2 WHERE `postid` = 100")

    defects = await check_topic(db, 10)
    assert [(d["table"], d["id"]) for d in defects] == [(db.t.posts, 100)]
    assert "does not match" in defects[0]["defect"]

    with pytest.raises(IntegrityDefect) as info:
        await check_topic(db, 10, strict=True)
    assert info.value.defects == defects


async def test_broken_first_post_link(db, raw_rows):
    await db.execute(f"UPDATE `{db.t.posts}` SET `is_first_post` = 0 WHERE `postid` = 100")
    messages = [d["defect"] for d in await check_topic(db, 10)]
    assert "first post 100 is not flagged is_first_post" in messages
    assert "has 0 first posts" in messages

    await db.execute(f"UPDATE `{db.t.topics}` SET `first_postid` = 555 WHERE `topicid` = 10")
    messages = [d["defect"] for d in await check_topic(db, 10)]
    assert "first_postid 555 does not exist" in messages


async def test_answer_and_solved_rules(db, raw_rows):
    await db.execute(f"UPDATE `{db.t.topics}` SET `solved` = 1 WHERE `topicid` = 10")
    await db.execute(f"UPDATE `{db.t.posts}` SET `is_answer` = 1 WHERE `postid` = 100")
    messages = {d["defect"] for d in await check_topic(db, 10)}
    assert messages == {"answer in non-question topic 10"}

    await db.execute(f"UPDATE `{db.t.posts}` SET `is_answer` = 0 WHERE `postid` = 100")
    messages = {d["defect"] for d in await check_topic(db, 10)}
    assert messages == {"solved without an answer"}


async def test_orphans_across_tables(db, raw_rows):
    await db.execute(
        f"INSERT INTO `{db.t.forums}` (`forumid`, `title`, `slug`, `parentid`) VALUES (2, 'Lost', 'lost', 77)"
    )
    await db.execute(
        f"""
        INSERT INTO `{db.t.posts}` (`postid`, `topicid`, `forumid`, `userid`, `body`)
        VALUES (200, 99, 1, 1, 'stray')
        """
    )
    defects = {(d["table"], d["id"]) for d in await check_integrity(db)}
    assert defects == {(db.t.forums, 2), (db.t.posts, 200)}

    with pytest.raises(IntegrityDefect):
        await check_integrity(db, strict=True)
