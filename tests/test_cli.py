"""run.py 명령: 별도 이벤트 루프에서 돌기 때문에 일반 동기 테스트로 실행한다."""
import pytest
from databases import Database

import run
from database import ForumDB, TableNames


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """run.database 를 임시 SQLite 파일로 바꿔 끼운 Commands"""
    test_db = Database(f"sqlite+aiosqlite:///{tmp_path / 'cli.sqlite3'}")
    monkeypatch.setattr(run, "database", test_db)
    monkeypatch.setattr(run, "get_forum_db", lambda prefix: ForumDB(test_db, TableNames.with_prefix(prefix)))
    return run.Commands()


def test_install_check_reconcile_drop(cli):
    assert cli.tables(prefix="cli_") == []
    cli.install(prefix="cli_")
    tables = cli.tables(prefix="cli_")
    assert len(tables) == 16
    assert "cli_posts" in tables

    assert cli.check(prefix="cli_") == {"defects": [], "drift": []}
    assert cli.reconcile(prefix="cli_") == {"counters": [], "tags": {}}

    cli.drop(prefix="cli_")
    assert len(cli.tables(prefix="cli_")) == 16
    cli.drop(prefix="cli_", yes=True)
    assert cli.tables(prefix="cli_") == []
