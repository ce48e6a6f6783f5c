# models/visits.py
"""접속자 추적. (userid, ip, forumid, topicid) 당 한 행, time 만 갱신."""
from typing import Any, Dict, List, Optional

from config import ONLINE_WINDOW
from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS
from .utils import unix_now


async def track_visit(
    db: ForumDB,
    userid: int,
    name: str,
    ip: str,
    forumid: int = 0,
    topicid: int = 0,
    time: Optional[int] = None,
) -> bool:
    """반환값: 새 추적 행이면 True, 기존 행 갱신이면 False"""
    ts = time or unix_now()
    params = {"userid": userid, "name": name, "ip": ip,
              "forumid": forumid, "topicid": topicid, "time": ts}
    try:
        await db.execute(
            f"""
            INSERT INTO `{db.t.visits}` (`userid`, `name`, `ip`, `time`, `forumid`, `topicid`)
            VALUES (:userid, :name, :ip, :time, :forumid, :topicid)
            """,
            params,
        )
        return True
    except INTEGRITY_ERRORS:
        await db.execute(
            f"""
            UPDATE `{db.t.visits}` SET `time` = :time, `name` = :name
            WHERE `userid` = :userid AND `ip` = :ip AND `forumid` = :forumid AND `topicid` = :topicid
            """,
            params,
        )
        return False


async def online_visitors(
    db: ForumDB,
    window: int = ONLINE_WINDOW,
    forumid: Optional[int] = None,
    topicid: Optional[int] = None,
    now: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """최근 window 초 안의 방문. (time, forumid) / (time, topicid) 인덱스."""
    params: Dict[str, Any] = {"since": (now or unix_now()) - window}
    where = ["`time` >= :since"]
    if forumid is not None:
        where.append("`forumid` = :forumid")
        params["forumid"] = forumid
    if topicid is not None:
        where.append("`topicid` = :topicid")
        params["topicid"] = topicid
    return await db.fetch_all(
        f"SELECT * FROM `{db.t.visits}` WHERE {' AND '.join(where)} ORDER BY `time` DESC, `id` DESC",
        params,
    )


async def prune_visits(db: ForumDB, window: int = ONLINE_WINDOW, now: Optional[int] = None) -> None:
    await db.execute(
        f"DELETE FROM `{db.t.visits}` WHERE `time` < :before",
        {"before": (now or unix_now()) - window},
    )
