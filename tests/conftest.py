import pytest
from databases import Database

from database import ForumDB, TableNames, ensure_schema
from models import create_forum, create_profile, create_topic, create_usergroup

AUTHOR, READER, OTHER = 1, 2, 3


@pytest.fixture
async def db(tmp_path):
    """테스트마다 새 SQLite 파일 + 전체 스키마"""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'forum.sqlite3'}")
    await database.connect()
    forum_db = ForumDB(database, TableNames.with_prefix("test_"))
    await ensure_schema(forum_db)
    yield forum_db
    await database.disconnect()


@pytest.fixture
async def users(db):
    groupid = await create_usergroup(db, "Registered", cans={"cr": 1, "vt": 1})
    for userid, name in ((AUTHOR, "author"), (READER, "reader"), (OTHER, "other")):
        await create_profile(db, userid, name, groupid)
    return {"groupid": groupid, "ids": (AUTHOR, READER, OTHER)}


@pytest.fixture
async def forum(db, users):
    return await create_forum(db, "General", slug="general")


@pytest.fixture
async def topic(db, forum):
    return await create_topic(db, forum, AUTHOR, "Hello world", "first post body")
