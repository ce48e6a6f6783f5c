# models/subscriptions.py
import secrets
from typing import Any, Dict, List

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, InvalidOperation, NotFound
from logger import logger
from .constants import SUBSCRIBABLE, ItemType
from .forums import get_forum
from .lifecycle import remove
from .topics import get_topic
from .utils import as_flag


def _item_type(value: Any) -> ItemType:
    try:
        itemtype = ItemType(value)
    except ValueError:
        raise InvalidOperation(f"invalid item type: {value}")
    if itemtype not in SUBSCRIBABLE:
        raise InvalidOperation(f"cannot subscribe to a {itemtype.value}")
    return itemtype


def new_confirm_key() -> str:
    """confirmkey 컬럼(varchar 32)에 맞는 랜덤 키"""
    return secrets.token_hex(16)


async def _find(db: ForumDB, itemid: int, itemtype: ItemType, userid: int, user_email: str):
    return await db.fetch_one(
        f"""
        SELECT * FROM `{db.t.subscribes}`
        WHERE `itemid` = :itemid AND `type` = :type AND `userid` = :userid AND `user_email` = :email
        """,
        {"itemid": itemid, "type": itemtype.value, "userid": userid, "email": user_email},
    )


async def subscribe(
    db: ForumDB,
    itemid: int,
    itemtype: ItemType,
    userid: int,
    user_name: str,
    user_email: str,
    active: bool = False,
) -> Dict[str, Any]:
    """
    구독 추가. 같은 (item, type, user, email) 구독이 이미 있으면 그 행을 그대로 돌려준다.
    active=False 면 confirm_subscription 으로 확인해야 활성화된다.
    """
    itemtype = _item_type(itemtype)
    if itemtype is ItemType.FORUM:
        await get_forum(db, itemid)
    else:
        await get_topic(db, itemid)

    try:
        await db.execute(
            f"""
            INSERT INTO `{db.t.subscribes}` (`itemid`, `type`, `confirmkey`, `userid`, `active`, `user_name`, `user_email`)
            VALUES (:itemid, :type, :confirmkey, :userid, :active, :user_name, :user_email)
            """,
            {
                "itemid": itemid, "type": itemtype.value, "confirmkey": new_confirm_key(),
                "userid": userid, "active": as_flag(active),
                "user_name": user_name, "user_email": user_email,
            },
        )
    except INTEGRITY_ERRORS:
        existing = await _find(db, itemid, itemtype, userid, user_email)
        if existing is None:
            raise
        return existing
    logger.info("subscribed: %s %s user=%s", itemtype.value, itemid, userid)
    return await _find(db, itemid, itemtype, userid, user_email)


async def confirm_subscription(db: ForumDB, confirmkey: str) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.subscribes}` WHERE `confirmkey` = :key", {"key": confirmkey}
    )
    if not row:
        raise NotFound("subscription not found")
    if not row["active"]:
        await db.execute(
            f"UPDATE `{db.t.subscribes}` SET `active` = 1 WHERE `subid` = :id", {"id": row["subid"]}
        )
        row["active"] = 1
    return row


async def unsubscribe(db: ForumDB, confirmkey: str) -> None:
    row = await db.fetch_one(
        f"SELECT `subid` FROM `{db.t.subscribes}` WHERE `confirmkey` = :key", {"key": confirmkey}
    )
    if not row:
        raise NotFound("subscription not found")
    await remove(db, "subscribes", subid=row["subid"])


async def list_subscribers(
    db: ForumDB, itemid: int, itemtype: ItemType, active_only: bool = True
) -> List[Dict[str, Any]]:
    itemtype = _item_type(itemtype)
    sql = f"SELECT * FROM `{db.t.subscribes}` WHERE `itemid` = :itemid AND `type` = :type"
    if active_only:
        sql += " AND `active` = 1"
    return await db.fetch_all(sql + " ORDER BY `subid` ASC", {"itemid": itemid, "type": itemtype.value})
