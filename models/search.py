# models/search.py
"""
전문 검색. 제목만 / 본문만 / 제목+본문 세 가지 모드.

- MySQL: FULLTEXT 키 `title`, `body`, `title_plus_body` 에 맞춘 MATCH ... AGAINST (BOOLEAN MODE)
- SQLite: FTS5 외부 콘텐츠 테이블 `<table>_fts` 에 컬럼 필터를 건 MATCH
모든 검색어가 들어 있어야 매치된다.
"""
import re
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.ddl_sqlite import fts_table
from database.errors import InvalidOperation
from .constants import SearchMode, Status
from .utils import clamp_page

MYSQL_COLUMNS = {
    SearchMode.TITLE: "p.`title`",
    SearchMode.BODY: "p.`body`",
    SearchMode.TITLE_BODY: "p.`title`, p.`body`",
}

FTS_FILTERS = {
    SearchMode.TITLE: "title : ",
    SearchMode.BODY: "body : ",
    SearchMode.TITLE_BODY: "",
}


def search_terms(query: str) -> List[str]:
    return re.findall(r"\w+", query or "", flags=re.UNICODE)


def fts_query(terms: List[str], mode: SearchMode) -> str:
    """SQLite FTS5: 'body : "alpha" AND body : "beta"'"""
    prefix = FTS_FILTERS[mode]
    return " AND ".join(f'{prefix}"{t}"' for t in terms)


def boolean_query(terms: List[str]) -> str:
    """MySQL BOOLEAN MODE: '+alpha +beta'"""
    return " ".join(f"+{t}" for t in terms)


def _mode(value: Any) -> SearchMode:
    try:
        return SearchMode(value)
    except ValueError:
        raise InvalidOperation(f"invalid search mode: {value}")


async def search_posts(
    db: ForumDB,
    query: str,
    mode: SearchMode = SearchMode.TITLE_BODY,
    forumid: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """공개 토픽의 공개 글만 검색. 관련도 순."""
    mode = _mode(mode)
    terms = search_terms(query)
    if not terms:
        return []
    limit, offset = clamp_page(limit, offset)
    params: Dict[str, Any] = {"status": int(Status.PUBLISHED), "limit": limit, "offset": offset}
    forum_cond = ""
    if forumid is not None:
        forum_cond = " AND p.`forumid` = :forumid"
        params["forumid"] = forumid

    if db.is_mysql:
        cols = MYSQL_COLUMNS[mode]
        params["q"] = boolean_query(terms)
        sql = f"""
            SELECT p.* FROM `{db.t.posts}` p
            JOIN `{db.t.topics}` tp ON tp.`topicid` = p.`topicid`
            WHERE MATCH({cols}) AGAINST(:q IN BOOLEAN MODE)
                AND p.`status` = :status AND tp.`status` = :status{forum_cond}
            ORDER BY MATCH({cols}) AGAINST(:q IN BOOLEAN MODE) DESC, p.`postid` DESC
            LIMIT :limit OFFSET :offset
        """
    else:
        fts = fts_table(db.t.posts)
        params["q"] = fts_query(terms, mode)
        sql = f"""
            SELECT p.* FROM `{fts}` JOIN `{db.t.posts}` p ON p.`postid` = `{fts}`.rowid
            JOIN `{db.t.topics}` tp ON tp.`topicid` = p.`topicid`
            WHERE `{fts}` MATCH :q AND p.`status` = :status AND tp.`status` = :status{forum_cond}
            ORDER BY `{fts}`.rank, p.`postid` DESC
            LIMIT :limit OFFSET :offset
        """
    return await db.fetch_all(sql, params)


async def search_topics(
    db: ForumDB,
    query: str,
    forumid: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """공개 토픽 제목 검색"""
    terms = search_terms(query)
    if not terms:
        return []
    limit, offset = clamp_page(limit, offset)
    params: Dict[str, Any] = {"status": int(Status.PUBLISHED), "limit": limit, "offset": offset}
    forum_cond = ""
    if forumid is not None:
        forum_cond = " AND tp.`forumid` = :forumid"
        params["forumid"] = forumid

    if db.is_mysql:
        params["q"] = boolean_query(terms)
        sql = f"""
            SELECT tp.* FROM `{db.t.topics}` tp
            WHERE MATCH(tp.`title`) AGAINST(:q IN BOOLEAN MODE) AND tp.`status` = :status{forum_cond}
            ORDER BY MATCH(tp.`title`) AGAINST(:q IN BOOLEAN MODE) DESC, tp.`topicid` DESC
            LIMIT :limit OFFSET :offset
        """
    else:
        fts = fts_table(db.t.topics)
        params["q"] = fts_query(terms, SearchMode.TITLE)
        sql = f"""
            SELECT tp.* FROM `{fts}` JOIN `{db.t.topics}` tp ON tp.`topicid` = `{fts}`.rowid
            WHERE `{fts}` MATCH :q AND tp.`status` = :status{forum_cond}
            ORDER BY `{fts}`.rank, tp.`topicid` DESC
            LIMIT :limit OFFSET :offset
        """
    return await db.fetch_all(sql, params)
