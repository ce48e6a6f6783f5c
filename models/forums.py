# models/forums.py
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, Duplicate, InvalidOperation, NotFound
from logger import logger
from .constants import Status
from .lifecycle import tombstone
from .utils import as_flag, slugify


async def create_forum(
    db: ForumDB,
    title: str,
    slug: Optional[str] = None,
    parentid: int = 0,
    description: Optional[str] = None,
    order: int = 0,
    status: Status = Status.PUBLISHED,
    is_cat: bool = False,
    cat_layout: int = 0,
    icon: Optional[str] = None,
    color: str = "",
) -> int:
    """포럼 생성 후 forumid 반환. slug 는 앞 191자 기준 UNIQUE."""
    title_s = (title or "").strip()
    if not title_s:
        raise InvalidOperation("forum title is required")
    if parentid:
        await get_forum(db, parentid)

    slug_s = (slug or "").strip() or slugify(title_s)
    try:
        forumid = await db.execute(
            f"""
            INSERT INTO `{db.t.forums}` (`title`, `slug`, `description`, `parentid`, `icon`,
                `status`, `is_cat`, `cat_layout`, `order`, `color`)
            VALUES (:title, :slug, :description, :parentid, :icon,
                :status, :is_cat, :cat_layout, :order, :color)
            """,
            {
                "title": title_s, "slug": slug_s, "description": description,
                "parentid": parentid, "icon": icon, "status": int(status),
                "is_cat": as_flag(is_cat), "cat_layout": cat_layout,
                "order": order, "color": color,
            },
        )
    except INTEGRITY_ERRORS as e:
        raise Duplicate(f"forum slug already exists: {slug_s}") from e
    logger.info("forum created: id=%s slug=%s", forumid, slug_s)
    return int(forumid)


async def get_forum(db: ForumDB, forumid: int) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.forums}` WHERE `forumid` = :id", {"id": forumid}
    )
    if not row:
        raise NotFound(f"forum {forumid} not found")
    return row


async def get_forum_by_slug(db: ForumDB, slug: str) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.forums}` WHERE `slug` = :slug", {"slug": slug}
    )
    if not row:
        raise NotFound(f"forum '{slug}' not found")
    return row


async def list_forums(
    db: ForumDB,
    parentid: Optional[int] = None,
    status: Optional[Status] = Status.PUBLISHED,
) -> List[Dict[str, Any]]:
    """`order` 순 정렬. parentid/status 가 None 이면 조건 없음."""
    where, params = [], {}
    if parentid is not None:
        where.append("`parentid` = :parentid")
        params["parentid"] = parentid
    if status is not None:
        where.append("`status` = :status")
        params["status"] = int(status)
    sql = f"SELECT * FROM `{db.t.forums}`"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY `order` ASC, `forumid` ASC"
    return await db.fetch_all(sql, params)


async def forum_tree(db: ForumDB, status: Optional[Status] = Status.PUBLISHED) -> List[Dict[str, Any]]:
    """루트(parentid=0)부터 children 을 채운 중첩 트리"""
    rows = await list_forums(db, status=status)
    by_parent: Dict[int, List[Dict[str, Any]]] = {}
    for row in rows:
        by_parent.setdefault(row["parentid"], []).append(row)
    for row in rows:
        row["children"] = by_parent.get(row["forumid"], [])
    return by_parent.get(0, [])


async def _ancestors(db: ForumDB, forumid: int) -> List[int]:
    chain, seen = [], set()
    current = forumid
    while current and current not in seen:
        seen.add(current)
        chain.append(current)
        row = await db.fetch_one(
            f"SELECT `parentid` FROM `{db.t.forums}` WHERE `forumid` = :id", {"id": current}
        )
        current = row["parentid"] if row else 0
    return chain


async def move_forum(db: ForumDB, forumid: int, parentid: int, order: Optional[int] = None) -> None:
    """부모 변경. 존재하지 않는 부모, 자기 자신/하위 포럼 아래로의 이동(순환)은 거절."""
    await get_forum(db, forumid)
    if parentid:
        await get_forum(db, parentid)
        if forumid in await _ancestors(db, parentid):
            raise InvalidOperation(f"forum {forumid} cannot be moved under its own descendant {parentid}")

    params = {"id": forumid, "parentid": parentid}
    sets = "`parentid` = :parentid"
    if order is not None:
        sets += ", `order` = :order"
        params["order"] = order
    await db.execute(f"UPDATE `{db.t.forums}` SET {sets} WHERE `forumid` = :id", params)


async def set_forum_status(db: ForumDB, forumid: int, status: Status) -> None:
    await get_forum(db, forumid)
    if status == Status.DELETED:
        await tombstone(db, "forums", forumid)
        return
    await db.execute(
        f"UPDATE `{db.t.forums}` SET `status` = :status WHERE `forumid` = :id",
        {"status": int(status), "id": forumid},
    )


async def touch_last_post(db: ForumDB, forumid: int, topicid: int, postid: int,
                          userid: int, created: str) -> None:
    """포럼의 last_* 비정규화 필드 갱신"""
    await db.execute(
        f"""
        UPDATE `{db.t.forums}`
        SET `last_topicid` = :topicid, `last_postid` = :postid,
            `last_userid` = :userid, `last_post_date` = :created
        WHERE `forumid` = :forumid
        """,
        {"topicid": topicid, "postid": postid, "userid": userid,
         "created": created, "forumid": forumid},
    )
