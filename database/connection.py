# database/connection.py
from typing import Any, Dict, List, Mapping, Optional, Set

from databases import Database

from config import DATABASE_URL, DB_CHARSET, DB_COLLATE, TABLE_PREFIX
from logger import logger
from .ddl_mysql import charset_collate, mysql_statements, select_engine
from .ddl_sqlite import fts_table, sqlite_statements
from .errors import SchemaError
from .tables import TableNames

database = Database(DATABASE_URL)


def escape_binds(sql: str) -> str:
    """databases 는 문자열 쿼리를 text() 로 감싼다 → DDL 안의 ':' 가 바인드로 오인되지 않게"""
    return sql.replace(":", "\\:")


class ForumDB:
    """
    Database + 테이블 이름 매핑 묶음.
    모든 저장소 함수는 이 객체를 첫 인자로 받는다 (전역 상태 없음).
    """

    def __init__(self, database: Database, tables: Optional[TableNames] = None):
        self.database = database
        self.t = tables or TableNames.with_prefix()

    @property
    def dialect(self) -> str:
        return self.database.url.dialect

    @property
    def is_mysql(self) -> bool:
        return self.dialect == "mysql"

    def transaction(self):
        return self.database.transaction()

    async def execute(self, query, values: Optional[Dict[str, Any]] = None) -> Any:
        return await self.database.execute(query, values)

    async def fetch_one(self, query, values: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        row = await self.database.fetch_one(query, values)
        return dict(row._mapping) if row is not None else None

    async def fetch_all(self, query, values: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        rows = await self.database.fetch_all(query, values)
        return [dict(r._mapping) for r in rows]

    async def fetch_val(self, query, values: Optional[Dict[str, Any]] = None) -> Any:
        return await self.database.fetch_val(query, values)


def get_forum_db(prefix: str = TABLE_PREFIX, tables: Optional[Mapping[str, str]] = None) -> ForumDB:
    """설정(DATABASE_URL, FORUM_TABLE_PREFIX) 기반 기본 핸들"""
    return ForumDB(database, TableNames.with_prefix(prefix, tables))


# ── 스키마 ────────────────────────────────────────────────

async def schema_statements(db: ForumDB, charset: str = DB_CHARSET, collate: str = DB_COLLATE):
    if db.is_mysql:
        version = await db.fetch_val("SELECT VERSION()")
        engine = select_engine(str(version))
        return mysql_statements(db.t, engine, charset_collate(charset, collate))
    return sqlite_statements(db.t)


async def ensure_schema(db: ForumDB, charset: str = DB_CHARSET, collate: str = DB_COLLATE) -> None:
    """
    모든 테이블을 "없으면 생성". 여러 번 실행해도 결과가 같다 (ALTER/마이그레이션 없음).
    DDL 실패는 삼키지 않고 SchemaError 로 올린다 → 설치 중단.
    """
    if not db.database.is_connected:
        await db.database.connect()

    for key, statements in await schema_statements(db, charset, collate):
        table = getattr(db.t, key)
        for sql in statements:
            try:
                await db.execute(escape_binds(sql))
            except Exception as e:
                logger.error("DDL failed for %s: %s", table, e)
                raise SchemaError(table, str(e)) from e
        logger.info("table ready: %s", table)


async def drop_schema(db: ForumDB) -> None:
    for key, table in reversed(list(db.t.items())):
        if not db.is_mysql and key in ("topics", "posts"):
            # 트리거는 테이블과 함께 삭제됨
            await db.execute(f"DROP TABLE IF EXISTS `{fts_table(table)}`")
        await db.execute(f"DROP TABLE IF EXISTS `{table}`")
        logger.info("table dropped: %s", table)


async def existing_tables(db: ForumDB) -> Set[str]:
    if db.is_mysql:
        rows = await db.fetch_all(
            "SELECT table_name AS name FROM information_schema.tables WHERE table_schema = DATABASE()"
        )
    else:
        rows = await db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    present = {r["name"] for r in rows}
    return {table for _, table in db.t.items() if table in present}
