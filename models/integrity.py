# models/integrity.py
"""
테이블 간 연결 검사. 스키마에 FK 가 없으므로 엔진은 잡지 못하는 결함을 여기서 보고한다.
쓰기 함수(create_topic / add_reply / move_topic)는 이런 결함을 만들지 않지만,
다른 경로(직접 SQL, 이전 데이터)로 들어온 행은 검사해야 한다.
"""
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.errors import IntegrityDefect
from logger import logger
from .constants import Status, TopicType
from .topics import get_topic


def _defect(table: str, id: Any, defect: str) -> Dict[str, Any]:
    return {"table": table, "id": id, "defect": defect}


async def _topic_defects(db: ForumDB, topicid: Optional[int] = None) -> List[Dict[str, Any]]:
    t = db.t
    params: Dict[str, Any] = {}
    only_tp = only_p = ""
    if topicid is not None:
        only_tp = " AND tp.`topicid` = :topicid"
        only_p = " AND p.`topicid` = :topicid"
        params["topicid"] = topicid
    defects: List[Dict[str, Any]] = []

    # 첫 글 연결
    rows = await db.fetch_all(
        f"""
        SELECT tp.`topicid`, tp.`first_postid`, p.`postid`, p.`is_first_post`, p.`topicid` AS post_topicid
        FROM `{t.topics}` tp LEFT JOIN `{t.posts}` p ON p.`postid` = tp.`first_postid`
        WHERE (p.`postid` IS NULL OR p.`is_first_post` <> 1 OR p.`topicid` <> tp.`topicid`){only_tp}
        """,
        params,
    )
    for r in rows:
        if r["postid"] is None:
            msg = f"first_postid {r['first_postid']} does not exist"
        elif r["post_topicid"] != r["topicid"]:
            msg = f"first post {r['postid']} belongs to topic {r['post_topicid']}"
        else:
            msg = f"first post {r['postid']} is not flagged is_first_post"
        defects.append(_defect(t.topics, r["topicid"], msg))

    # 첫 글 개수
    rows = await db.fetch_all(
        f"""
        SELECT tp.`topicid`, COUNT(p.`postid`) AS n
        FROM `{t.topics}` tp LEFT JOIN `{t.posts}` p ON p.`topicid` = tp.`topicid` AND p.`is_first_post` = 1
        WHERE 1 = 1{only_tp}
        GROUP BY tp.`topicid`
        HAVING COUNT(p.`postid`) <> 1
        """,
        params,
    )
    for r in rows:
        defects.append(_defect(t.topics, r["topicid"], f"has {r['n']} first posts"))

    # post.forumid 와 topic.forumid 불일치, 없는 토픽을 가리키는 글
    rows = await db.fetch_all(
        f"""
        SELECT p.`postid`, p.`forumid`, p.`topicid`, tp.`forumid` AS topic_forumid, tp.`topicid` AS found
        FROM `{t.posts}` p LEFT JOIN `{t.topics}` tp ON tp.`topicid` = p.`topicid`
        WHERE (tp.`topicid` IS NULL OR tp.`forumid` <> p.`forumid`){only_p}
        """,
        params,
    )
    for r in rows:
        if r["found"] is None:
            msg = f"topic {r['topicid']} does not exist"
        else:
            msg = f"forumid {r['forumid']} does not match topic {r['topicid']} forumid {r['topic_forumid']}"
        defects.append(_defect(t.posts, r["postid"], msg))

    # solved 인데 공개 답변 없음
    rows = await db.fetch_all(
        f"""
        SELECT tp.`topicid` FROM `{t.topics}` tp
        WHERE tp.`solved` = 1{only_tp} AND NOT EXISTS (
            SELECT 1 FROM `{t.posts}` p
            WHERE p.`topicid` = tp.`topicid` AND p.`is_answer` = 1 AND p.`status` = :published
        )
        """,
        {**params, "published": int(Status.PUBLISHED)},
    )
    for r in rows:
        defects.append(_defect(t.topics, r["topicid"], "solved without an answer"))

    # 질문이 아닌 토픽의 채택 답변
    rows = await db.fetch_all(
        f"""
        SELECT p.`postid`, p.`topicid` FROM `{t.posts}` p JOIN `{t.topics}` tp ON tp.`topicid` = p.`topicid`
        WHERE p.`is_answer` = 1 AND tp.`type` <> :question{only_p}
        """,
        {**params, "question": int(TopicType.QUESTION)},
    )
    for r in rows:
        defects.append(_defect(t.posts, r["postid"], f"answer in non-question topic {r['topicid']}"))

    # 없는 포럼에 속한 토픽
    rows = await db.fetch_all(
        f"""
        SELECT tp.`topicid`, tp.`forumid` FROM `{t.topics}` tp LEFT JOIN `{t.forums}` f ON f.`forumid` = tp.`forumid`
        WHERE f.`forumid` IS NULL{only_tp}
        """,
        params,
    )
    for r in rows:
        defects.append(_defect(t.topics, r["topicid"], f"forum {r['forumid']} does not exist"))

    return defects


async def _forum_defects(db: ForumDB) -> List[Dict[str, Any]]:
    rows = await db.fetch_all(
        f"""
        SELECT f.`forumid`, f.`parentid` FROM `{db.t.forums}` f
        LEFT JOIN `{db.t.forums}` parent ON parent.`forumid` = f.`parentid`
        WHERE f.`parentid` <> 0 AND parent.`forumid` IS NULL
        """
    )
    return [_defect(db.t.forums, r["forumid"], f"parent forum {r['parentid']} does not exist") for r in rows]


async def check_topic(db: ForumDB, topicid: int, strict: bool = False) -> List[Dict[str, Any]]:
    """토픽 하나의 연결 결함 목록. strict=True 면 결함이 있을 때 IntegrityDefect."""
    await get_topic(db, topicid)
    defects = await _topic_defects(db, topicid)
    if defects and strict:
        raise IntegrityDefect(f"topic {topicid} has {len(defects)} defect(s)", defects)
    return defects


async def check_integrity(db: ForumDB, strict: bool = False) -> List[Dict[str, Any]]:
    defects = await _forum_defects(db) + await _topic_defects(db)
    for d in defects:
        logger.warning("integrity defect: %s id=%s %s", d["table"], d["id"], d["defect"])
    if defects and strict:
        raise IntegrityDefect(f"{len(defects)} integrity defect(s)", defects)
    return defects
