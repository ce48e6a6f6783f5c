# run.py
import asyncio
import os
import sys

import fire

# 현재 파일 기준 루트 디렉토리를 모듈 경로로 등록
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, BASE_DIR)

from config import DB_CHARSET, DB_COLLATE, TABLE_PREFIX  # noqa: E402
from database import database, drop_schema, ensure_schema, existing_tables, get_forum_db  # noqa: E402
from logger import logger  # noqa: E402
from models import check_integrity, counter_drift, reconcile_counters, reconcile_tag_counts  # noqa: E402


def _run(job, prefix: str):
    async def main():
        db = get_forum_db(prefix)
        await database.connect()
        try:
            return await job(db)
        finally:
            await database.disconnect()

    return asyncio.run(main())


class Commands:

    def install(self, *, prefix: str = TABLE_PREFIX, charset: str = DB_CHARSET, collate: str = DB_COLLATE):
        """
        포럼 테이블 생성 (이미 있으면 건너뜀).
        """
        _run(lambda db: ensure_schema(db, charset, collate), prefix)
        logger.info("install finished (prefix=%s)", prefix)

    def drop(self, *, prefix: str = TABLE_PREFIX, yes: bool = False):
        """
        포럼 테이블 전체 삭제. --yes 없이는 실행하지 않는다.
        """
        if not yes:
            logger.warning("drop skipped: pass --yes to delete every `%s*` table", prefix)
            return
        _run(drop_schema, prefix)

    def tables(self, *, prefix: str = TABLE_PREFIX):
        """현재 존재하는 포럼 테이블"""
        return sorted(_run(existing_tables, prefix))

    def check(self, *, prefix: str = TABLE_PREFIX):
        """
        연결 결함 + 카운터 drift 보고. 아무것도 고치지 않는다.
        """
        async def job(db):
            return {
                "defects": await check_integrity(db),
                "drift": await counter_drift(db),
            }

        report = _run(job, prefix)
        logger.info("check: %d defect(s), %d drifted counter(s)", len(report["defects"]), len(report["drift"]))
        return report

    def reconcile(self, *, prefix: str = TABLE_PREFIX):
        """
        모든 카운터와 태그 사용 횟수를 원본 행에서 다시 계산.
        """
        async def job(db):
            return {
                "counters": await reconcile_counters(db),
                "tags": await reconcile_tag_counts(db),
            }

        result = _run(job, prefix)
        logger.info("reconcile: %d counter(s), %d tag(s) repaired", len(result["counters"]), len(result["tags"]))
        return result


if __name__ == "__main__":
    fire.Fire(Commands)
