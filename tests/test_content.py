"""태그, 편집 이력, 언어/문구"""
import pytest

from database import Duplicate, NotFound
from models import (
    add_language,
    create_topic,
    get_language_by_name,
    get_phrases,
    get_tag,
    latest_revision,
    list_revisions,
    normalize_tags,
    popular_tags,
    reconcile_tag_counts,
    save_revision,
    set_phrase,
    set_topic_tags,
)

from .conftest import AUTHOR, READER


def test_normalize_tags():
    assert normalize_tags(" Python ,asyncio,, python ") == ["python", "asyncio"]
    assert normalize_tags(["Big   Data", ""]) == ["big data"]
    assert normalize_tags(None) == []
    assert len(normalize_tags(["x" * 300])[0]) == 190


async def test_tag_counts_follow_topics(db, forum):
    t1 = await create_topic(db, forum, AUTHOR, "One", "body", tags=["Python", "asyncio", "python"])
    await create_topic(db, forum, READER, "Two", "body", tags="python")
    assert (await get_tag(db, "python"))["count"] == 2
    assert (await get_tag(db, "asyncio"))["count"] == 1

    assert await set_topic_tags(db, t1["topicid"], ["asyncio", "SQL"]) == ["asyncio", "sql"]
    assert (await get_tag(db, "python"))["count"] == 1
    assert (await get_tag(db, "asyncio"))["count"] == 1
    assert (await get_tag(db, "sql"))["count"] == 1
    assert await reconcile_tag_counts(db) == {}

    await db.execute(f"UPDATE `{db.t.tags}` SET `count` = 9 WHERE `tag` = 'sql'")
    assert [t["tag"] for t in await popular_tags(db, limit=1)] == ["sql"]
    assert await reconcile_tag_counts(db) == {"sql": 1}

    await set_topic_tags(db, t1["topicid"], [])
    assert (await get_tag(db, "sql"))["count"] == 0
    assert "sql" not in [t["tag"] for t in await popular_tags(db)]
    with pytest.raises(NotFound):
        await get_tag(db, "rust")


async def test_revision_versions(db):
    r1 = await save_revision(db, 5, "wpf_body", "draft one", userid=AUTHOR)
    r2 = await save_revision(db, 5, "wpf_body", "draft two", userid=AUTHOR)
    other = await save_revision(db, 5, "wpf_title", "title draft", userid=AUTHOR)
    assert (r1["version"], r2["version"], other["version"]) == (1, 2, 1)

    assert [r["version"] for r in await list_revisions(db, 5, "wpf_body")] == [2, 1]
    assert len(await list_revisions(db, 5)) == 3
    assert (await latest_revision(db, 5, "wpf_body"))["body"] == "draft two"
    with pytest.raises(NotFound):
        await latest_revision(db, 6, "wpf_body")


async def test_languages_and_phrases(db):
    langid = await add_language(db, "Korean")
    assert (await get_language_by_name(db, "Korean"))["langid"] == langid
    with pytest.raises(Duplicate):
        await add_language(db, "Korean")
    with pytest.raises(NotFound):
        await get_language_by_name(db, "Klingon")

    await set_phrase(db, langid, "Reply", "답글")
    await set_phrase(db, langid, "Topic", "토픽", package="addon")
    await set_phrase(db, langid, "Reply", "댓글")
    assert await get_phrases(db, langid) == {"Reply": "댓글", "Topic": "토픽"}
    assert await get_phrases(db, langid, package="wpforo") == {"Reply": "댓글"}


async def test_phrase_keys_sharing_a_long_prefix(db):
    """앞 191자가 같은 서로 다른 키는 조용히 버려지지 않고 Duplicate."""
    langid = await add_language(db, "English")
    base = "k" * 191
    await set_phrase(db, langid, base + "_one", "first")
    with pytest.raises(Duplicate):
        await set_phrase(db, langid, base + "_two", "second")
    await set_phrase(db, langid, base + "_one", "updated")
    assert await get_phrases(db, langid) == {base + "_one": "updated"}
