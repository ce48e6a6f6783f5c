# models/phrases.py
"""언어 / 번역 문구 저장소 (렌더링은 하지 않음)"""
from typing import Any, Dict, Optional

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, Duplicate, InvalidOperation, NotFound
from .constants import DEFAULT_PACKAGE


async def add_language(db: ForumDB, name: str) -> int:
    name_s = (name or "").strip()
    if not name_s:
        raise InvalidOperation("language name is required")
    try:
        langid = await db.execute(
            f"INSERT INTO `{db.t.languages}` (`name`) VALUES (:name)", {"name": name_s}
        )
    except INTEGRITY_ERRORS as e:
        raise Duplicate(f"language already exists: {name_s}") from e
    return int(langid)


async def get_language_by_name(db: ForumDB, name: str) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.languages}` WHERE `name` = :name", {"name": name}
    )
    if not row:
        raise NotFound(f"language '{name}' not found")
    return row


async def set_phrase(db: ForumDB, langid: int, key: str, value: str, package: str = DEFAULT_PACKAGE) -> None:
    """
    (langid, phrase_key) 기준 삽입, 있으면 값 갱신.
    UNIQUE 키는 phrase_key 앞 191자만 보므로, 앞부분만 같은 다른 키와 부딪히면 Duplicate.
    """
    params = {"langid": langid, "key": key, "value": value, "package": package}
    try:
        await db.execute(
            f"""
            INSERT INTO `{db.t.phrases}` (`langid`, `phrase_key`, `phrase_value`, `package`)
            VALUES (:langid, :key, :value, :package)
            """,
            params,
        )
    except INTEGRITY_ERRORS as e:
        phraseid = await db.fetch_val(
            f"SELECT `phraseid` FROM `{db.t.phrases}` WHERE `langid` = :langid AND `phrase_key` = :key",
            {"langid": langid, "key": key},
        )
        if phraseid is None:
            raise Duplicate(f"phrase key shares its first 191 characters with another key: {key[:40]}") from e
        await db.execute(
            f"UPDATE `{db.t.phrases}` SET `phrase_value` = :value, `package` = :package WHERE `phraseid` = :id",
            {"value": value, "package": package, "id": phraseid},
        )


async def get_phrases(db: ForumDB, langid: int, package: Optional[str] = None) -> Dict[str, str]:
    sql = f"SELECT `phrase_key`, `phrase_value` FROM `{db.t.phrases}` WHERE `langid` = :langid"
    params: Dict[str, Any] = {"langid": langid}
    if package is not None:
        sql += " AND `package` = :package"
        params["package"] = package
    rows = await db.fetch_all(sql, params)
    return {r["phrase_key"]: r["phrase_value"] for r in rows}
