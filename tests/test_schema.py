import re

import pytest

from database import SchemaError, TableNames, database, drop_schema, ensure_schema, existing_tables, get_forum_db
from database.connection import ForumDB, escape_binds
from database.ddl_mysql import charset_collate, mysql_statements, parse_version, select_engine
from database.ddl_sqlite import sqlite_statements

COLUMN_LINE = re.compile(r"^\s*`(\w+)`\s", re.MULTILINE)


def _columns(statements):
    """테이블별 첫 문장(CREATE TABLE)에서 컬럼 이름만 뽑는다"""
    return {key: COLUMN_LINE.findall(sqls[0]) for key, sqls in statements}


async def test_ensure_schema_is_idempotent(db):
    """
    두 번 실행해도 오류 없이 같은 테이블 집합.
    """
    first = await existing_tables(db)
    await ensure_schema(db)
    second = await existing_tables(db)
    assert first == second == set(db.t.as_dict().values())
    assert len(first) == 16


async def test_drop_schema(db):
    await drop_schema(db)
    assert await existing_tables(db) == set()
    await ensure_schema(db)
    assert len(await existing_tables(db)) == 16


async def test_ddl_failure_raises_schema_error(db):
    broken = ForumDB(db.database, TableNames.with_prefix("x_", {"forums": "bad`name"}))
    with pytest.raises(SchemaError) as info:
        await ensure_schema(broken)
    assert info.value.table == "bad`name"
    assert info.value.__cause__ is not None


def test_mysql_and_sqlite_share_columns():
    t = TableNames.with_prefix()
    mysql = _columns(mysql_statements(t))
    sqlite = _columns(sqlite_statements(t))
    assert list(mysql) == list(sqlite) == list(TableNames.keys())
    for key in mysql:
        assert mysql[key] == sqlite[key], key


def test_mysql_engine_per_table():
    ddl = dict(mysql_statements(TableNames.with_prefix(), engine="MyISAM", cc="DEFAULT CHARACTER SET utf8mb4"))
    assert "ENGINE=MyISAM" in ddl["topics"][0]
    assert "ENGINE=MyISAM" in ddl["posts"][0]
    assert "ENGINE=InnoDB" in ddl["forums"][0]
    assert "ENGINE=MyISAM" in ddl["phrases"][0]
    assert "FULLTEXT KEY `title_plus_body`" in ddl["posts"][0]
    assert ddl["forums"][0].rstrip().endswith("DEFAULT CHARACTER SET utf8mb4")


@pytest.mark.parametrize("version, engine", [
    ("5.5.62-log", "MyISAM"),
    ("5.6.3", "MyISAM"),
    ("5.6.4", "InnoDB"),
    ("8.0.36-0ubuntu0.22.04.1", "InnoDB"),
    ("10.6.16-MariaDB", "InnoDB"),
])
def test_select_engine(version, engine):
    assert select_engine(version) == engine


def test_parse_version_pads_missing_parts():
    assert parse_version("8") == (8, 0, 0)
    assert parse_version("5.7") == (5, 7, 0)


def test_charset_collate():
    assert charset_collate("utf8mb4", "utf8mb4_unicode_520_ci") == \
        "DEFAULT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_520_ci"
    assert charset_collate("utf8mb4", "") == "DEFAULT CHARACTER SET utf8mb4"
    assert charset_collate("", "") == ""


def test_table_names():
    names = TableNames.with_prefix("wp_wpforo_", {"posts": "legacy_posts"})
    assert names.forums == "wp_wpforo_forums"
    assert names.posts == "legacy_posts"
    assert names.rename(tags="t").tags == "t"
    with pytest.raises(ValueError):
        TableNames.with_prefix("x_", {"nope": "n"})


def test_escape_binds():
    assert escape_binds("DEFAULT '0000-00-00 00:00:00'") == "DEFAULT '0000-00-00 00\\:00\\:00'"


def test_get_forum_db_uses_configured_database():
    forum_db = get_forum_db("site2_", {"posts": "legacy_posts"})
    assert forum_db.database is database
    assert forum_db.t.forums == "site2_forums"
    assert forum_db.t.posts == "legacy_posts"
