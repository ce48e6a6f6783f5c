# database/errors.py
import sqlite3

from pymysql.err import IntegrityError as MySQLIntegrityError

# 드라이버별 UNIQUE 위반 예외 (aiosqlite / aiomysql 모두 원본 예외를 그대로 올림)
INTEGRITY_ERRORS = (sqlite3.IntegrityError, MySQLIntegrityError)


class ForumError(Exception):
    """모든 포럼 저장소 오류의 기반 클래스 (HTTPException 처럼 status_code/detail 보유)"""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class SchemaError(ForumError):
    """DDL 실행 실패. 설치/업그레이드 단계를 중단시켜야 한다."""

    def __init__(self, table: str, detail: str):
        super().__init__(f"failed to create `{table}`: {detail}")
        self.table = table


class NotFound(ForumError):
    status_code = 404


class Duplicate(ForumError):
    status_code = 409


class InvalidOperation(ForumError):
    status_code = 422


class IntegrityDefect(ForumError):
    """호출자 쪽 무결성 결함 (예: post.forumid 와 topic.forumid 불일치)"""

    def __init__(self, detail: str, defects=None):
        super().__init__(detail)
        self.defects = list(defects or [])
