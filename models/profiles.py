# models/profiles.py
import json
from typing import Any, Dict, Mapping, Optional

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, Duplicate, InvalidOperation, NotFound
from logger import logger
from .constants import DEFAULT_MEMBER_TITLE, ProfileStatus
from .lifecycle import tombstone
from .utils import as_flag, now_str

# update_profile 로 바꿀 수 있는 자유 입력 필드
PROFILE_FIELDS = (
    "title", "site", "icq", "aim", "yahoo", "msn", "facebook", "twitter", "gtalk",
    "skype", "avatar", "signature", "about", "occupation", "location", "timezone",
)


def _profile_status(value: Any) -> ProfileStatus:
    try:
        return ProfileStatus(value)
    except ValueError:
        raise InvalidOperation(f"invalid profile status: {value}")


def _decode_cans(row: Dict[str, Any]) -> Dict[str, Any]:
    row["cans"] = json.loads(row["cans"]) if row.get("cans") else {}
    return row


# ── 사용자 그룹 ────────────────────────────────────────────
async def create_usergroup(
    db: ForumDB,
    name: str,
    cans: Optional[Mapping[str, Any]] = None,
    description: Optional[str] = None,
    utitle: str = "",
    role: str = "",
    access: str = "",
    color: str = "",
    visible: bool = True,
    secondary: bool = False,
) -> int:
    """그룹 생성. 권한(cans)은 JSON 으로 저장. 이름 중복은 Duplicate."""
    name_s = (name or "").strip()
    if not name_s:
        raise InvalidOperation("usergroup name is required")
    try:
        groupid = await db.execute(
            f"""
            INSERT INTO `{db.t.usergroups}` (`name`, `cans`, `description`, `utitle`, `role`,
                `access`, `color`, `visible`, `secondary`)
            VALUES (:name, :cans, :description, :utitle, :role, :access, :color, :visible, :secondary)
            """,
            {
                "name": name_s, "cans": json.dumps(dict(cans or {})), "description": description,
                "utitle": utitle or name_s, "role": role, "access": access, "color": color,
                "visible": as_flag(visible), "secondary": as_flag(secondary),
            },
        )
    except INTEGRITY_ERRORS as e:
        raise Duplicate(f"usergroup already exists: {name_s}") from e
    logger.info("usergroup created: id=%s name=%s", groupid, name_s)
    return int(groupid)


async def get_usergroup(db: ForumDB, groupid: int) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.usergroups}` WHERE `groupid` = :id", {"id": groupid}
    )
    if not row:
        raise NotFound(f"usergroup {groupid} not found")
    return _decode_cans(row)


# ── 접근 권한 세트 ─────────────────────────────────────────
async def create_access(db: ForumDB, access: str, title: str, cans: Optional[Mapping[str, Any]] = None) -> int:
    try:
        accessid = await db.execute(
            f"INSERT INTO `{db.t.accesses}` (`access`, `title`, `cans`) VALUES (:access, :title, :cans)",
            {"access": access, "title": title, "cans": json.dumps(dict(cans or {}))},
        )
    except INTEGRITY_ERRORS as e:
        raise Duplicate(f"access already exists: {access}") from e
    return int(accessid)


async def get_access(db: ForumDB, access: str) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.accesses}` WHERE `access` = :access", {"access": access}
    )
    if not row:
        raise NotFound(f"access '{access}' not found")
    return _decode_cans(row)


# ── 프로필 ─────────────────────────────────────────────────
async def create_profile(
    db: ForumDB,
    userid: int,
    username: str,
    groupid: int,
    title: str = DEFAULT_MEMBER_TITLE,
    status: ProfileStatus = ProfileStatus.ACTIVE,
    **fields: Any,
) -> Dict[str, Any]:
    """외부 사용자(userid)와 1:1 프로필 생성"""
    await get_usergroup(db, groupid)
    status = _profile_status(status)
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise InvalidOperation(f"unknown profile fields: {', '.join(sorted(unknown))}")

    values = {"userid": userid, "username": username, "groupid": groupid,
              "title": title, "status": status.value, **fields}
    cols = ", ".join(f"`{c}`" for c in values)
    binds = ", ".join(f":{c}" for c in values)
    try:
        await db.execute(f"INSERT INTO `{db.t.profiles}` ({cols}) VALUES ({binds})", values)
    except INTEGRITY_ERRORS as e:
        raise Duplicate(f"profile already exists for user {userid}") from e
    return await get_profile(db, userid)


async def get_profile(db: ForumDB, userid: int) -> Dict[str, Any]:
    row = await db.fetch_one(
        f"SELECT * FROM `{db.t.profiles}` WHERE `userid` = :id", {"id": userid}
    )
    if not row:
        raise NotFound(f"profile {userid} not found")
    return row


async def update_profile(db: ForumDB, userid: int, **fields: Any) -> Dict[str, Any]:
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise InvalidOperation(f"unknown profile fields: {', '.join(sorted(unknown))}")
    await get_profile(db, userid)
    if fields:
        sets = ", ".join(f"`{c}` = :{c}" for c in fields)
        await db.execute(
            f"UPDATE `{db.t.profiles}` SET {sets} WHERE `userid` = :userid", {**fields, "userid": userid}
        )
    return await get_profile(db, userid)


async def touch_login(db: ForumDB, userid: int, online_time: int) -> None:
    await db.execute(
        f"UPDATE `{db.t.profiles}` SET `last_login` = :last_login, `online_time` = :online_time WHERE `userid` = :userid",
        {"last_login": now_str(), "online_time": online_time, "userid": userid},
    )


async def set_profile_status(db: ForumDB, userid: int, status: ProfileStatus) -> None:
    status = _profile_status(status)
    await get_profile(db, userid)
    if status is ProfileStatus.TRASHED:
        await tombstone(db, "profiles", userid)
    else:
        await db.execute(
            f"UPDATE `{db.t.profiles}` SET `status` = :status WHERE `userid` = :userid",
            {"status": status.value, "userid": userid},
        )
    logger.info("profile %s status -> %s", userid, status.value)


async def set_profile_group(db: ForumDB, userid: int, groupid: int) -> None:
    await get_usergroup(db, groupid)
    await get_profile(db, userid)
    await db.execute(
        f"UPDATE `{db.t.profiles}` SET `groupid` = :groupid WHERE `userid` = :userid",
        {"groupid": groupid, "userid": userid},
    )
