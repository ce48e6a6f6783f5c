# models/posts.py
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.errors import InvalidOperation, NotFound
from logger import logger
from .constants import Status, TopicType
from .counters import atomic_add
from .forums import touch_last_post
from .lifecycle import tombstone
from .topics import get_topic
from .utils import as_flag, clamp_page, now_str

REPLY_TITLE_PREFIX = "RE: "

# list_posts 정렬 기준
POST_ORDERS = {
    "created": "`is_first_post` DESC, `created` ASC, `postid` ASC",
    "votes": "`is_first_post` DESC, `is_answer` DESC, `votes` DESC, `postid` ASC",
}


async def get_post(db: ForumDB, postid: int) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.posts}` WHERE `postid` = :id", {"id": postid}
    )
    if not row:
        raise NotFound(f"post {postid} not found")
    return row


async def _shift_post_counters(db: ForumDB, post: Dict[str, Any], topic: Dict[str, Any], sign: int) -> None:
    """글 하나가 공개/비공개로 바뀔 때의 카운터 이동"""
    question = topic["type"] == TopicType.QUESTION
    is_answer_slot = post["parentid"] == 0 and not post["is_first_post"]

    await atomic_add(db, "topics", "posts", "topicid", topic["topicid"], sign)
    if question and is_answer_slot:
        await atomic_add(db, "topics", "answers", "topicid", topic["topicid"], sign)

    # 포럼/프로필 카운터는 공개 토픽의 공개 글만 센다
    if topic["status"] != Status.PUBLISHED:
        return
    await atomic_add(db, "forums", "posts", "forumid", topic["forumid"], sign)
    await atomic_add(db, "profiles", "posts", "userid", post["userid"], sign)
    if question:
        col = "answers" if is_answer_slot else "comments"
        if post["parentid"] or is_answer_slot:
            await atomic_add(db, "profiles", col, "userid", post["userid"], sign)


async def add_reply(
    db: ForumDB,
    topicid: int,
    userid: int,
    body: str,
    parentid: int = 0,
    title: Optional[str] = None,
    status: Status = Status.PUBLISHED,
    name: str = "",
    email: str = "",
    private: bool = False,
    created: Optional[str] = None,
) -> int:
    """
    답글 추가. forumid 는 토픽에서 가져오므로 topic/post 포럼 불일치가 생길 수 없다.
    parentid 가 있으면 같은 토픽의 글이어야 하고, root 는 최상위 조상 글.
    """
    topic = await get_topic(db, topicid)
    if topic["closed"]:
        raise InvalidOperation(f"topic {topicid} is closed")
    if topic["status"] == Status.DELETED:
        raise InvalidOperation(f"topic {topicid} is deleted")

    root = None
    if parentid:
        parent = await get_post(db, parentid)
        if parent["topicid"] != topicid:
            raise InvalidOperation(f"parent post {parentid} belongs to topic {parent['topicid']}, not {topicid}")
        root = parent["root"] or parent["postid"]

    title_s = (title or "").strip() or f"{REPLY_TITLE_PREFIX}{topic['title']}"
    ts = created or now_str()
    post = {"parentid": parentid, "is_first_post": 0, "userid": userid}

    async with db.transaction():
        postid = await db.execute(
            f"""
            INSERT INTO `{db.t.posts}` (`parentid`, `forumid`, `topicid`, `userid`, `title`, `body`,
                `created`, `modified`, `is_first_post`, `status`, `name`, `email`, `private`, `root`)
            VALUES (:parentid, :forumid, :topicid, :userid, :title, :body,
                :created, :created, 0, :status, :name, :email, :private, :root)
            """,
            {
                "parentid": parentid, "forumid": topic["forumid"], "topicid": topicid,
                "userid": userid, "title": title_s, "body": body, "created": ts,
                "status": int(status), "name": name, "email": email,
                "private": as_flag(private), "root": root,
            },
        )
        if Status(status) == Status.PUBLISHED:
            await _shift_post_counters(db, post, topic, +1)
            await db.execute(
                f"UPDATE `{db.t.topics}` SET `last_post` = :postid, `modified` = :ts WHERE `topicid` = :topicid",
                {"postid": postid, "ts": ts, "topicid": topicid},
            )
            if topic["status"] == Status.PUBLISHED:
                await touch_last_post(db, topic["forumid"], topicid, postid, userid, ts)

    logger.info("reply added: post=%s topic=%s parent=%s", postid, topicid, parentid)
    return int(postid)


async def list_posts(
    db: ForumDB,
    topicid: int,
    status: Optional[Status] = Status.PUBLISHED,
    order: str = "created",
    limit: int = 20,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """토픽의 글 목록. 첫 글이 항상 맨 앞. (topicid, status) 인덱스 사용."""
    if order not in POST_ORDERS:
        raise InvalidOperation(f"unknown post order: {order}")
    limit, offset = clamp_page(limit, offset)
    params: Dict[str, Any] = {"topicid": topicid, "limit": limit, "offset": offset}
    where = "`topicid` = :topicid"
    if status is not None:
        where += " AND `status` = :status"
        params["status"] = int(status)
    return await db.fetch_all(
        f"SELECT * FROM `{db.t.posts}` WHERE {where} ORDER BY {POST_ORDERS[order]} LIMIT :limit OFFSET :offset",
        params,
    )


async def list_replies(db: ForumDB, postid: int, status: Optional[Status] = Status.PUBLISHED) -> List[Dict[str, Any]]:
    """직계 답글. (topicid, parentid) 인덱스로 찾는다."""
    parent = await get_post(db, postid)
    params: Dict[str, Any] = {"topicid": parent["topicid"], "parentid": postid}
    where = "`topicid` = :topicid AND `parentid` = :parentid"
    if status is not None:
        where += " AND `status` = :status"
        params["status"] = int(status)
    return await db.fetch_all(
        f"SELECT * FROM `{db.t.posts}` WHERE {where} ORDER BY `created` ASC, `postid` ASC", params
    )


async def list_answers(db: ForumDB, topicid: int) -> List[Dict[str, Any]]:
    """채택된 답변. (topicid, is_answer) 인덱스."""
    return await db.fetch_all(
        f"""
        SELECT * FROM `{db.t.posts}`
        WHERE `topicid` = :topicid AND `is_answer` = 1 AND `status` = :status
        ORDER BY `postid` ASC
        """,
        {"topicid": topicid, "status": int(Status.PUBLISHED)},
    )


async def edit_post(
    db: ForumDB,
    postid: int,
    body: Optional[str] = None,
    title: Optional[str] = None,
    modified: Optional[str] = None,
) -> Dict[str, Any]:
    """본문/제목 수정. 첫 글의 제목을 바꾸면 토픽 제목도 같이 바뀐다."""
    post = await get_post(db, postid)
    sets, params = ["`modified` = :modified"], {"id": postid, "modified": modified or now_str()}
    if body is not None:
        sets.append("`body` = :body")
        params["body"] = body
    title_s = (title or "").strip()
    if title_s:
        sets.append("`title` = :title")
        params["title"] = title_s

    async with db.transaction():
        await db.execute(f"UPDATE `{db.t.posts}` SET {', '.join(sets)} WHERE `postid` = :id", params)
        if title_s and post["is_first_post"]:
            await db.execute(
                f"UPDATE `{db.t.topics}` SET `title` = :title, `modified` = :modified WHERE `topicid` = :topicid",
                {"title": title_s, "modified": params["modified"], "topicid": post["topicid"]},
            )
    return await get_post(db, postid)


async def refresh_solved(db: ForumDB, topicid: int) -> None:
    """solved = 공개된 채택 답변 존재 여부. 한 문장으로 다시 계산한다."""
    await db.execute(
        f"""
        UPDATE `{db.t.topics}`
        SET `solved` = CASE WHEN EXISTS (
            SELECT 1 FROM `{db.t.posts}` p
            WHERE p.`topicid` = :topicid AND p.`is_answer` = 1 AND p.`status` = :status
        ) THEN 1 ELSE 0 END
        WHERE `topicid` = :topicid
        """,
        {"topicid": topicid, "status": int(Status.PUBLISHED)},
    )


async def set_post_status(db: ForumDB, postid: int, status: Status) -> None:
    post = await get_post(db, postid)
    if post["is_first_post"]:
        raise InvalidOperation(f"post {postid} is a first post; change the topic status instead")
    topic = await get_topic(db, post["topicid"])
    was_live = post["status"] == Status.PUBLISHED
    now_live = Status(status) == Status.PUBLISHED

    async with db.transaction():
        if status == Status.DELETED:
            await tombstone(db, "posts", postid)
        else:
            await db.execute(
                f"UPDATE `{db.t.posts}` SET `status` = :status WHERE `postid` = :id",
                {"status": int(status), "id": postid},
            )
        if was_live != now_live:
            await _shift_post_counters(db, post, topic, +1 if now_live else -1)
        if post["is_answer"]:
            await refresh_solved(db, post["topicid"])
    logger.info("post %s status %s -> %s", postid, post["status"], int(status))


async def mark_answer(db: ForumDB, postid: int, is_answer: bool = True) -> None:
    """질문 토픽의 최상위 답글만 채택 가능"""
    post = await get_post(db, postid)
    topic = await get_topic(db, post["topicid"])
    if topic["type"] != TopicType.QUESTION:
        raise InvalidOperation(f"topic {topic['topicid']} is not a question")
    if post["is_first_post"] or post["parentid"]:
        raise InvalidOperation(f"post {postid} is not an answer to the question")

    async with db.transaction():
        await db.execute(
            f"UPDATE `{db.t.posts}` SET `is_answer` = :flag WHERE `postid` = :id",
            {"flag": as_flag(is_answer), "id": postid},
        )
        await refresh_solved(db, topic["topicid"])
