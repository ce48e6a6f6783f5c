# models/topics.py
from typing import Any, Dict, Iterable, List, Optional

from database.connection import ForumDB
from database.errors import InvalidOperation, NotFound
from logger import logger
from .constants import Status, TopicType
from .counters import atomic_add
from .forums import get_forum, touch_last_post
from .lifecycle import tombstone
from .tags import normalize_tags, release_tag, use_tag
from .utils import as_flag, clamp_page, now_str, slugify


async def get_topic(db: ForumDB, topicid: int) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.topics}` WHERE `topicid` = :id", {"id": topicid}
    )
    if not row:
        raise NotFound(f"topic {topicid} not found")
    return row


async def get_first_post(db: ForumDB, topicid: int) -> Dict[str, Any]:
    topic = await get_topic(db, topicid)
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.posts}` WHERE `postid` = :id", {"id": topic["first_postid"]}
    )
    if not row:
        raise NotFound(f"first post of topic {topicid} not found")
    return row


async def create_topic(
    db: ForumDB,
    forumid: int,
    userid: int,
    title: str,
    body: str,
    slug: Optional[str] = None,
    type: TopicType = TopicType.REGULAR,
    status: Status = Status.PUBLISHED,
    private: bool = False,
    name: str = "",
    email: str = "",
    prefix: str = "",
    tags: Optional[Iterable[str]] = None,
    created: Optional[str] = None,
) -> Dict[str, int]:
    """
    토픽 + 첫 글을 한 트랜잭션에서 생성.
    topics.first_postid / last_post 를 첫 글로 채우고, 공개 상태면 포럼/프로필 카운터를 올린다.
    """
    forum = await get_forum(db, forumid)
    if forum["is_cat"]:
        raise InvalidOperation(f"forum {forumid} is a category; topics go into its sub-forums")
    title_s = (title or "").strip()
    if not title_s:
        raise InvalidOperation("topic title is required")

    slug_s = (slug or "").strip() or slugify(title_s)
    tag_list = normalize_tags(tags)
    ts = created or now_str()
    live = Status(status) == Status.PUBLISHED

    async with db.transaction():
        topicid = await db.execute(
            f"""
            INSERT INTO `{db.t.topics}` (`forumid`, `first_postid`, `userid`, `title`, `slug`,
                `created`, `modified`, `posts`, `type`, `private`, `status`,
                `name`, `email`, `prefix`, `tags`)
            VALUES (:forumid, 0, :userid, :title, :slug,
                :created, :created, :posts, :type, :private, :status,
                :name, :email, :prefix, :tags)
            """,
            {
                "forumid": forumid, "userid": userid, "title": title_s, "slug": slug_s,
                "created": ts, "posts": 1 if live else 0, "type": int(type),
                "private": as_flag(private), "status": int(status),
                "name": name, "email": email, "prefix": prefix,
                "tags": ",".join(tag_list) or None,
            },
        )
        postid = await db.execute(
            f"""
            INSERT INTO `{db.t.posts}` (`parentid`, `forumid`, `topicid`, `userid`, `title`, `body`,
                `created`, `modified`, `is_first_post`, `status`, `name`, `email`, `private`)
            VALUES (0, :forumid, :topicid, :userid, :title, :body,
                :created, :created, 1, :status, :name, :email, :private)
            """,
            {
                "forumid": forumid, "topicid": topicid, "userid": userid,
                "title": title_s, "body": body, "created": ts, "status": int(status),
                "name": name, "email": email, "private": as_flag(private),
            },
        )
        await db.execute(
            f"UPDATE `{db.t.topics}` SET `first_postid` = :postid, `last_post` = :postid WHERE `topicid` = :topicid",
            {"postid": postid, "topicid": topicid},
        )
        if live:
            await shift_topic_counters(db, topicid, +1)
            await touch_last_post(db, forumid, topicid, postid, userid, ts)
        for tag in tag_list:
            await use_tag(db, tag)

    logger.info("topic created: id=%s forum=%s first_post=%s", topicid, forumid, postid)
    return {"topicid": int(topicid), "first_postid": int(postid)}


async def shift_topic_counters(db: ForumDB, topicid: int, sign: int) -> None:
    """
    토픽 전체가 공개/비공개로 바뀔 때 포럼·작성자 카운터를 통째로 이동.
    topics.posts 자체는 토픽 status 와 무관하므로 건드리지 않는다.
    """
    topic = await get_topic(db, topicid)
    question = topic["type"] == TopicType.QUESTION

    await atomic_add(db, "forums", "topics", "forumid", topic["forumid"], sign)
    await atomic_add(db, "forums", "posts", "forumid", topic["forumid"], sign * topic["posts"])
    if question:
        await atomic_add(db, "profiles", "questions", "userid", topic["userid"], sign)

    rows = await db.fetch_all(
        f"""
        SELECT `userid`,
               COUNT(*) AS posts,
               SUM(CASE WHEN `parentid` = 0 AND `is_first_post` = 0 THEN 1 ELSE 0 END) AS answers,
               SUM(CASE WHEN `parentid` <> 0 THEN 1 ELSE 0 END) AS comments
        FROM `{db.t.posts}`
        WHERE `topicid` = :topicid AND `status` = :status
        GROUP BY `userid`
        """,
        {"topicid": topicid, "status": int(Status.PUBLISHED)},
    )
    for r in rows:
        await atomic_add(db, "profiles", "posts", "userid", r["userid"], sign * int(r["posts"]))
        if question:
            await atomic_add(db, "profiles", "answers", "userid", r["userid"], sign * int(r["answers"] or 0))
            await atomic_add(db, "profiles", "comments", "userid", r["userid"], sign * int(r["comments"] or 0))


async def list_topics(
    db: ForumDB,
    forumid: int,
    status: Optional[Status] = Status.PUBLISHED,
    private: Optional[bool] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """고정(sticky) 먼저, 그 다음 최근 글 순. (forumid, status, private) 인덱스 사용."""
    limit, offset = clamp_page(limit, offset)
    where = ["`forumid` = :forumid"]
    params: Dict[str, Any] = {"forumid": forumid, "limit": limit, "offset": offset,
                              "sticky": int(TopicType.STICKY)}
    if status is not None:
        where.append("`status` = :status")
        params["status"] = int(status)
    if private is not None:
        where.append("`private` = :private")
        params["private"] = as_flag(private)
    return await db.fetch_all(
        f"""
        SELECT * FROM `{db.t.topics}`
        WHERE {" AND ".join(where)}
        ORDER BY CASE WHEN `type` = :sticky THEN 0 ELSE 1 END, `last_post` DESC, `topicid` DESC
        LIMIT :limit OFFSET :offset
        """,
        params,
    )


async def set_topic_status(db: ForumDB, topicid: int, status: Status) -> None:
    topic = await get_topic(db, topicid)
    was_live = topic["status"] == Status.PUBLISHED
    now_live = Status(status) == Status.PUBLISHED

    async with db.transaction():
        # 내려갈 때는 첫 글이 아직 공개 상태일 때 빼야 카운터가 맞는다
        if was_live and not now_live:
            await shift_topic_counters(db, topicid, -1)
        if status == Status.DELETED:
            await tombstone(db, "topics", topicid)
        else:
            await db.execute(
                f"UPDATE `{db.t.topics}` SET `status` = :status WHERE `topicid` = :id",
                {"status": int(status), "id": topicid},
            )
        await _sync_first_post(db, topic, status)
        if now_live and not was_live:
            await shift_topic_counters(db, topicid, +1)
    logger.info("topic %s status %s -> %s", topicid, topic["status"], int(status))


async def _sync_first_post(db: ForumDB, topic: Dict[str, Any], status: Status) -> None:
    """첫 글 status 는 토픽 status 를 따른다. topics.posts 도 같이 보정."""
    first = await db.fetch_one(
        f"SELECT `postid`, `status` FROM `{db.t.posts}` WHERE `postid` = :id",
        {"id": topic["first_postid"]},
    )
    if not first or first["status"] == int(status):
        return
    if status == Status.DELETED:
        await tombstone(db, "posts", first["postid"])
    else:
        await db.execute(
            f"UPDATE `{db.t.posts}` SET `status` = :status WHERE `postid` = :id",
            {"status": int(status), "id": first["postid"]},
        )
    was_live = first["status"] == Status.PUBLISHED
    now_live = Status(status) == Status.PUBLISHED
    if was_live != now_live:
        await atomic_add(db, "topics", "posts", "topicid", topic["topicid"], +1 if now_live else -1)


async def close_topic(db: ForumDB, topicid: int, closed: bool = True) -> None:
    await get_topic(db, topicid)
    await db.execute(
        f"UPDATE `{db.t.topics}` SET `closed` = :closed WHERE `topicid` = :id",
        {"closed": as_flag(closed), "id": topicid},
    )


async def move_topic(db: ForumDB, topicid: int, forumid: int) -> None:
    """토픽 이동. posts.forumid(비정규화)도 같이 옮겨 topic/post 포럼 일치를 유지한다."""
    topic = await get_topic(db, topicid)
    dest = await get_forum(db, forumid)
    if dest["is_cat"]:
        raise InvalidOperation(f"forum {forumid} is a category; topics go into its sub-forums")
    if topic["forumid"] == forumid:
        return

    async with db.transaction():
        await db.execute(
            f"UPDATE `{db.t.topics}` SET `forumid` = :forumid WHERE `topicid` = :id",
            {"forumid": forumid, "id": topicid},
        )
        await db.execute(
            f"UPDATE `{db.t.posts}` SET `forumid` = :forumid WHERE `topicid` = :id",
            {"forumid": forumid, "id": topicid},
        )
        if topic["status"] == Status.PUBLISHED:
            # posts 는 트랜잭션 안에서 다시 읽는다
            fresh = await get_topic(db, topicid)
            await atomic_add(db, "forums", "topics", "forumid", topic["forumid"], -1)
            await atomic_add(db, "forums", "posts", "forumid", topic["forumid"], -fresh["posts"])
            await atomic_add(db, "forums", "topics", "forumid", forumid, +1)
            await atomic_add(db, "forums", "posts", "forumid", forumid, fresh["posts"])
    logger.info("topic %s moved: forum %s -> %s", topicid, topic["forumid"], forumid)


async def set_topic_tags(db: ForumDB, topicid: int, tags: Optional[Iterable[str]]) -> List[str]:
    """topics.tags 교체 + 태그 사용 횟수 차분 반영"""
    topic = await get_topic(db, topicid)
    old = normalize_tags((topic["tags"] or "").split(","))
    new = normalize_tags(tags)

    async with db.transaction():
        await db.execute(
            f"UPDATE `{db.t.topics}` SET `tags` = :tags WHERE `topicid` = :id",
            {"tags": ",".join(new) or None, "id": topicid},
        )
        for tag in new:
            if tag not in old:
                await use_tag(db, tag)
        for tag in old:
            if tag not in new:
                await release_tag(db, tag)
    return new
