import pytest

from database import Duplicate, InvalidOperation, NotFound
from database.errors import INTEGRITY_ERRORS
from models import (
    ProfileStatus,
    create_access,
    create_profile,
    create_usergroup,
    get_access,
    get_profile,
    get_usergroup,
    set_profile_group,
    set_profile_status,
    update_profile,
)
from models.profiles import touch_login

from .conftest import AUTHOR


async def test_usergroup_cans_round_trip(db):
    groupid = await create_usergroup(db, "Moderator", cans={"eot": 1, "dot": 0}, role="editor")
    group = await get_usergroup(db, groupid)
    assert group["cans"] == {"eot": 1, "dot": 0}
    assert group["utitle"] == "Moderator"
    assert group["visible"] == 1

    with pytest.raises(Duplicate):
        await create_usergroup(db, "Moderator")
    with pytest.raises(NotFound):
        await get_usergroup(db, 999)


async def test_access_sets(db):
    await create_access(db, "standard", "Standard access", {"vf": 1})
    assert (await get_access(db, "standard"))["cans"] == {"vf": 1}
    with pytest.raises(Duplicate):
        await create_access(db, "standard", "Again")
    with pytest.raises(NotFound):
        await get_access(db, "full")


async def test_profile_lifecycle(db, users):
    profile = await get_profile(db, AUTHOR)
    assert profile["title"] == "member"
    assert profile["status"] == "active"
    assert profile["posts"] == 0

    with pytest.raises(Duplicate):
        await create_profile(db, AUTHOR, "again", users["groupid"])
    with pytest.raises(NotFound):
        await create_profile(db, 50, "nogroup", 999)
    with pytest.raises(InvalidOperation):
        await create_profile(db, 51, "bad", users["groupid"], password="x")

    updated = await update_profile(db, AUTHOR, location="Seoul", signature="--")
    assert (updated["location"], updated["signature"]) == ("Seoul", "--")


async def test_profile_status_and_group(db, users):
    await set_profile_status(db, AUTHOR, ProfileStatus.BLOCKED)
    assert (await get_profile(db, AUTHOR))["status"] == "blocked"
    await set_profile_status(db, AUTHOR, "trashed")
    assert (await get_profile(db, AUTHOR))["status"] == "trashed"
    with pytest.raises(InvalidOperation):
        await set_profile_status(db, AUTHOR, "banned")

    admins = await create_usergroup(db, "Admin")
    await set_profile_group(db, AUTHOR, admins)
    assert (await get_profile(db, AUTHOR))["groupid"] == admins
    with pytest.raises(NotFound):
        await set_profile_group(db, AUTHOR, 999)


async def test_status_column_is_restricted(db, users):
    with pytest.raises(INTEGRITY_ERRORS):
        await db.execute(
            f"UPDATE `{db.t.profiles}` SET `status` = 'banned' WHERE `userid` = :id", {"id": AUTHOR}
        )


async def test_touch_login(db, users):
    await touch_login(db, AUTHOR, 1_700_000_000)
    profile = await get_profile(db, AUTHOR)
    assert profile["online_time"] == 1_700_000_000
    assert profile["last_login"] != "0000-00-00 00:00:00"
