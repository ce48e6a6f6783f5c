# models/lifecycle.py
"""
삭제 정책 집행. 어떤 엔티티를 status 로 묻을지(tombstone), 행 자체를 지울지(remove)는
constants.DELETION 한 곳에서 정하고, 호출부는 반드시 이 두 함수를 거친다.
"""
from typing import Any, Dict

from database.connection import ForumDB
from database.errors import InvalidOperation
from .constants import DELETION, Deletion, ProfileStatus, Status

PRIMARY_KEYS = {
    "forums": "forumid",
    "topics": "topicid",
    "posts": "postid",
    "profiles": "userid",
    "likes": "likeid",
    "votes": "voteid",
    "views": "vid",
    "subscribes": "subid",
}

TOMBSTONE_VALUES: Dict[str, Any] = {
    "forums": int(Status.DELETED),
    "topics": int(Status.DELETED),
    "posts": int(Status.DELETED),
    "profiles": ProfileStatus.TRASHED.value,
}


def _policy(entity: str) -> Deletion:
    try:
        return DELETION[entity]
    except KeyError:
        raise InvalidOperation(f"no deletion policy for `{entity}`")


async def tombstone(db: ForumDB, entity: str, key: int, value: Any = None) -> None:
    """status 를 삭제 상태(기본값: TOMBSTONE_VALUES)로 바꾼다. 카운터 보정은 호출부(topics/posts) 책임."""
    if _policy(entity) is not Deletion.TOMBSTONE:
        raise InvalidOperation(f"`{entity}` rows are removed, not tombstoned")
    table = getattr(db.t, entity)
    pk = PRIMARY_KEYS[entity]
    await db.execute(
        f"UPDATE `{table}` SET `status` = :status WHERE `{pk}` = :key",
        {"status": TOMBSTONE_VALUES[entity] if value is None else value, "key": key},
    )


async def remove(db: ForumDB, entity: str, **where: Any) -> None:
    """토글 off: UNIQUE 키 컬럼으로 행을 물리 삭제"""
    if _policy(entity) is not Deletion.REMOVE:
        raise InvalidOperation(f"`{entity}` rows are tombstoned, not removed")
    if not where:
        raise InvalidOperation("remove() needs a key")
    table = getattr(db.t, entity)
    cond = " AND ".join(f"`{col}` = :{col}" for col in where)
    await db.execute(f"DELETE FROM `{table}` WHERE {cond}", where)
