# models/tags.py
"""
태그. topics.tags 컬럼(쉼표 구분 텍스트)이 토픽↔태그 연결이고,
tags.count 는 그 연결 수의 비정규화 카운터다.
"""
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Union

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, NotFound
from logger import logger
from .constants import TAG_MAX
from .counters import atomic_add
from .utils import clamp_page


def normalize_tags(tags: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """공백 정리 + 소문자 + 190자 절단 + 중복 제거(순서 유지)"""
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    out: List[str] = []
    for raw in tags:
        tag = re.sub(r"\s+", " ", (raw or "")).strip().lower()[:TAG_MAX].strip()
        if tag and tag not in out:
            out.append(tag)
    return out


async def use_tag(db: ForumDB, tag: str) -> None:
    try:
        await db.execute(
            f"INSERT INTO `{db.t.tags}` (`tag`, `count`) VALUES (:tag, 1)", {"tag": tag}
        )
    except INTEGRITY_ERRORS:
        # 이미 있는 태그 → 카운트만 증가
        await atomic_add(db, "tags", "count", "tag", tag, +1)


async def release_tag(db: ForumDB, tag: str) -> None:
    await atomic_add(db, "tags", "count", "tag", tag, -1)


async def get_tag(db: ForumDB, tag: str) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.tags}` WHERE `tag` = :tag", {"tag": tag}
    )
    if not row:
        raise NotFound(f"tag '{tag}' not found")
    return row


async def popular_tags(db: ForumDB, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]:
    limit, offset = clamp_page(limit, offset)
    return await db.fetch_all(
        f"""
        SELECT * FROM `{db.t.tags}` WHERE `count` > 0
        ORDER BY `count` DESC, `tag` ASC
        LIMIT :limit OFFSET :offset
        """,
        {"limit": limit, "offset": offset},
    )


async def reconcile_tag_counts(db: ForumDB) -> Dict[str, int]:
    """
    topics.tags 를 다시 세서 tags.count 를 맞춘다. 바뀐 태그 → 새 count 를 돌려준다.
    연결은 있는데 행이 없는 태그는 새로 만든다.
    """
    changed: Dict[str, int] = {}
    async with db.transaction():
        rows = await db.fetch_all(
            f"SELECT `tags` FROM `{db.t.topics}` WHERE `tags` IS NOT NULL AND `tags` <> ''"
        )
        actual: Counter = Counter()
        for r in rows:
            actual.update(normalize_tags(r["tags"]))

        stored = {r["tag"]: r["count"] for r in await db.fetch_all(f"SELECT `tag`, `count` FROM `{db.t.tags}`")}
        for tag in set(stored) | set(actual):
            count = actual.get(tag, 0)
            if tag not in stored:
                await db.execute(
                    f"INSERT INTO `{db.t.tags}` (`tag`, `count`) VALUES (:tag, :count)",
                    {"tag": tag, "count": count},
                )
            elif stored[tag] != count:
                await db.execute(
                    f"UPDATE `{db.t.tags}` SET `count` = :count WHERE `tag` = :tag",
                    {"tag": tag, "count": count},
                )
            else:
                continue
            changed[tag] = count

    for tag, count in changed.items():
        logger.warning("tag count repaired: %s -> %s", tag, count)
    return changed
