# models/counters.py
"""
비정규화 카운터.

- 증감은 항상 단일 UPDATE 식(`col = col + n`)으로 처리한다. 읽고-쓰기 금지.
- UNSIGNED 카운터 감소는 같은 문장 안에서 0 에서 멈춘다.
- 카운터가 원본 행과 어긋나는 것(drift)은 쓰기 중에 감지하지 않는다.
  `counter_drift` / `reconcile_counters` 가 배치로 재계산한다.
"""
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy import case, column, table, update

from database.connection import ForumDB
from logger import logger
from .constants import Status, TopicType


async def atomic_add(db: ForumDB, entity: str, col: str, key_col: str, key: Any,
                     delta: int, floor: bool = True) -> None:
    """
    서버 쪽에서 원자적으로 더하기/빼기.
    floor=True 면 감소 결과가 0 미만이 되지 않는다 (UNSIGNED 컬럼 보호).
    """
    if not delta:
        return
    t = table(getattr(db.t, entity), column(key_col), column(col))
    target = t.c[col]
    if delta < 0 and floor:
        n = -delta
        value = case((target >= n, target - n), else_=0)
    else:
        value = target + delta
    await db.execute(update(t).where(t.c[key_col] == key).values({col: value}))


@dataclass(frozen=True)
class Counter:
    entity: str
    key: str
    column: str
    source: str  # 바깥 테이블을 참조하는 상관 서브쿼리


def counter_definitions(db: ForumDB) -> List[Counter]:
    t = db.t
    pub = int(Status.PUBLISHED)
    q = int(TopicType.QUESTION)
    f, tp, p, pr = f"`{t.forums}`", f"`{t.topics}`", f"`{t.posts}`", f"`{t.profiles}`"
    live_posts = (
        f"FROM `{t.posts}` p JOIN `{t.topics}` tp ON tp.`topicid` = p.`topicid` "
        f"WHERE p.`status` = {pub} AND tp.`status` = {pub}"
    )
    return [
        Counter("forums", "forumid", "topics",
                f"SELECT COUNT(*) FROM `{t.topics}` tp WHERE tp.`forumid` = {f}.`forumid` AND tp.`status` = {pub}"),
        Counter("forums", "forumid", "posts",
                f"SELECT COUNT(*) {live_posts} AND tp.`forumid` = {f}.`forumid`"),
        Counter("topics", "topicid", "posts",
                f"SELECT COUNT(*) FROM `{t.posts}` p WHERE p.`topicid` = {tp}.`topicid` AND p.`status` = {pub}"),
        Counter("topics", "topicid", "answers",
                f"SELECT COUNT(*) FROM `{t.posts}` p WHERE p.`topicid` = {tp}.`topicid` AND p.`status` = {pub} "
                f"AND p.`parentid` = 0 AND p.`is_first_post` = 0 AND {tp}.`type` = {q}"),
        Counter("topics", "topicid", "votes",
                f"SELECT COALESCE(SUM(v.`reaction`), 0) FROM `{t.votes}` v "
                f"JOIN `{t.posts}` p ON p.`postid` = v.`postid` WHERE p.`topicid` = {tp}.`topicid`"),
        Counter("posts", "postid", "likes",
                f"SELECT COUNT(*) FROM `{t.likes}` l WHERE l.`postid` = {p}.`postid`"),
        Counter("posts", "postid", "votes",
                f"SELECT COALESCE(SUM(v.`reaction`), 0) FROM `{t.votes}` v WHERE v.`postid` = {p}.`postid`"),
        Counter("profiles", "userid", "posts",
                f"SELECT COUNT(*) {live_posts} AND p.`userid` = {pr}.`userid`"),
        Counter("profiles", "userid", "questions",
                f"SELECT COUNT(*) FROM `{t.topics}` tp WHERE tp.`userid` = {pr}.`userid` "
                f"AND tp.`status` = {pub} AND tp.`type` = {q}"),
        Counter("profiles", "userid", "answers",
                f"SELECT COUNT(*) {live_posts} AND p.`userid` = {pr}.`userid` "
                f"AND p.`parentid` = 0 AND p.`is_first_post` = 0 AND tp.`type` = {q}"),
        Counter("profiles", "userid", "comments",
                f"SELECT COUNT(*) {live_posts} AND p.`userid` = {pr}.`userid` "
                f"AND p.`parentid` <> 0 AND tp.`type` = {q}"),
        Counter("profiles", "userid", "like",
                f"SELECT COUNT(*) FROM `{t.likes}` l WHERE l.`post_userid` = {pr}.`userid`"),
    ]


async def counter_drift(db: ForumDB) -> List[Dict[str, Any]]:
    """저장된 카운터 ≠ 실제 집계인 행 목록"""
    drift = []
    for c in counter_definitions(db):
        tbl = getattr(db.t, c.entity)
        rows = await db.fetch_all(
            f"SELECT `{c.key}` AS id, `{c.column}` AS stored, ({c.source}) AS actual "
            f"FROM `{tbl}` WHERE `{c.column}` <> ({c.source})"
        )
        for r in rows:
            drift.append({
                "table": tbl,
                "id": r["id"],
                "column": c.column,
                "stored": int(r["stored"]),
                "actual": int(r["actual"]),
            })
    return drift


async def reconcile_counters(db: ForumDB) -> List[Dict[str, Any]]:
    """모든 카운터를 원본 행에서 다시 계산. 고친 drift 목록을 돌려준다."""
    async with db.transaction():
        drift = await counter_drift(db)
        for c in counter_definitions(db):
            tbl = getattr(db.t, c.entity)
            await db.execute(
                f"UPDATE `{tbl}` SET `{c.column}` = ({c.source}) WHERE `{c.column}` <> ({c.source})"
            )
    for d in drift:
        logger.warning("counter drift repaired: %s.%s id=%s %s -> %s",
                       d["table"], d["column"], d["id"], d["stored"], d["actual"])
    return drift
