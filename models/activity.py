# models/activity.py
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.errors import InvalidOperation
from .constants import ActivityType, ItemType
from .utils import as_flag, clamp_page, unix_now


def _enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        raise InvalidOperation(f"invalid {kind.__name__}: {value}")


async def add_activity(
    db: ForumDB,
    type: ActivityType,
    itemid: int,
    itemtype: ItemType,
    userid: int = 0,
    itemid_second: int = 0,
    name: str = "",
    email: str = "",
    content: Optional[str] = None,
    permalink: str = "",
    new: bool = True,
    date: Optional[int] = None,
) -> int:
    activity_type = _enum(ActivityType, type)
    item_type = _enum(ItemType, itemtype)
    activityid = await db.execute(
        f"""
        INSERT INTO `{db.t.activity}` (`type`, `itemid`, `itemtype`, `itemid_second`, `userid`,
            `name`, `email`, `date`, `content`, `permalink`, `new`)
        VALUES (:type, :itemid, :itemtype, :itemid_second, :userid,
            :name, :email, :date, :content, :permalink, :new)
        """,
        {
            "type": activity_type.value, "itemid": itemid, "itemtype": item_type.value,
            "itemid_second": itemid_second, "userid": userid, "name": name, "email": email,
            "date": date or unix_now(), "content": content, "permalink": permalink,
            "new": as_flag(new),
        },
    )
    return int(activityid)


async def list_activity(
    db: ForumDB,
    type: ActivityType,
    itemid: int,
    itemtype: ItemType,
    userid: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """(type, itemid, itemtype[, userid]) 인덱스 조회"""
    params: Dict[str, Any] = {
        "type": _enum(ActivityType, type).value,
        "itemid": itemid,
        "itemtype": _enum(ItemType, itemtype).value,
    }
    sql = f"SELECT * FROM `{db.t.activity}` WHERE `type` = :type AND `itemid` = :itemid AND `itemtype` = :itemtype"
    if userid is not None:
        sql += " AND `userid` = :userid"
        params["userid"] = userid
    return await db.fetch_all(sql + " ORDER BY `date` DESC, `id` DESC", params)


async def unread_activity(
    db: ForumDB, itemtype: ItemType, userid: int, limit: int = 20, offset: int = 0
) -> List[Dict[str, Any]]:
    """알림함: (itemtype, userid, new) 인덱스"""
    limit, offset = clamp_page(limit, offset)
    return await db.fetch_all(
        f"""
        SELECT * FROM `{db.t.activity}`
        WHERE `itemtype` = :itemtype AND `userid` = :userid AND `new` = 1
        ORDER BY `date` DESC, `id` DESC
        LIMIT :limit OFFSET :offset
        """,
        {"itemtype": _enum(ItemType, itemtype).value, "userid": userid, "limit": limit, "offset": offset},
    )


async def mark_activity_read(db: ForumDB, userid: int, activityid: Optional[int] = None) -> None:
    """activityid 가 없으면 사용자의 알림 전체를 읽음 처리"""
    sql = f"UPDATE `{db.t.activity}` SET `new` = 0 WHERE `userid` = :userid AND `new` = 1"
    params: Dict[str, Any] = {"userid": userid}
    if activityid is not None:
        sql += " AND `id` = :id"
        params["id"] = activityid
    await db.execute(sql, params)
