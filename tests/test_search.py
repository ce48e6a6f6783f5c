import pytest

from database import InvalidOperation
from models import (
    SearchMode,
    Status,
    add_reply,
    create_forum,
    create_topic,
    search_posts,
    search_topics,
    set_post_status,
    set_topic_status,
)
from models.search import boolean_query, fts_query, search_terms

from .conftest import AUTHOR, READER


@pytest.fixture
async def corpus(db, forum):
    t = await create_topic(db, forum, AUTHOR, "alpha beta", "gamma")
    return t


async def test_title_body_versus_body_only(db, corpus):
    """
    제목에만 있는 단어는 제목+본문 모드에서만 찾는다.
    """
    hits = await search_posts(db, "beta", SearchMode.TITLE_BODY)
    assert [p["postid"] for p in hits] == [corpus["first_postid"]]
    assert await search_posts(db, "beta", SearchMode.BODY) == []
    assert len(await search_posts(db, "beta", SearchMode.TITLE)) == 1
    assert len(await search_posts(db, "gamma", SearchMode.BODY)) == 1
    assert await search_posts(db, "gamma", SearchMode.TITLE) == []


async def test_all_terms_must_match(db, corpus):
    assert len(await search_posts(db, "alpha gamma")) == 1
    assert await search_posts(db, "alpha delta") == []


async def test_only_published_posts(db, corpus):
    reply = await add_reply(db, corpus["topicid"], READER, "delta epsilon")
    assert len(await search_posts(db, "delta")) == 1
    await set_post_status(db, reply, Status.UNAPPROVED)
    assert await search_posts(db, "delta") == []


async def test_posts_of_hidden_topics_are_not_found(db, corpus):
    """토픽이 비공개/삭제되면 그 안의 공개 답글도 검색되지 않는다."""
    await add_reply(db, corpus["topicid"], READER, "zeta secret")
    assert len(await search_posts(db, "zeta")) == 1

    await set_topic_status(db, corpus["topicid"], Status.UNAPPROVED)
    assert await search_posts(db, "zeta") == []
    await set_topic_status(db, corpus["topicid"], Status.PUBLISHED)
    assert len(await search_posts(db, "zeta")) == 1

    await set_topic_status(db, corpus["topicid"], Status.DELETED)
    assert await search_posts(db, "zeta") == []
    assert await search_posts(db, "alpha") == []


async def test_edits_are_indexed(db, corpus):
    await db.execute(
        f"UPDATE `{db.t.posts}` SET `body` = 'omega' WHERE `postid` = :id", {"id": corpus["first_postid"]}
    )
    assert await search_posts(db, "gamma") == []
    assert len(await search_posts(db, "omega", SearchMode.BODY)) == 1


async def test_forum_filter_and_topics(db, forum, corpus):
    other = await create_forum(db, "Other")
    await create_topic(db, other, AUTHOR, "alpha elsewhere", "text")

    assert len(await search_posts(db, "alpha")) == 2
    assert len(await search_posts(db, "alpha", forumid=other)) == 1
    assert [t["topicid"] for t in await search_topics(db, "beta")] == [corpus["topicid"]]
    assert len(await search_topics(db, "alpha", forumid=forum)) == 1


async def test_empty_or_invalid_query(db, corpus):
    assert await search_posts(db, "  !! ") == []
    with pytest.raises(InvalidOperation):
        await search_posts(db, "alpha", "everything")


def test_query_builders():
    terms = search_terms("Alpha, beta!")
    assert terms == ["Alpha", "beta"]
    assert fts_query(terms, SearchMode.BODY) == 'body : "Alpha" AND body : "beta"'
    assert fts_query(terms, SearchMode.TITLE_BODY) == '"Alpha" AND "beta"'
    assert boolean_query(terms) == "+Alpha +beta"
