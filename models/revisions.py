# models/revisions.py
from typing import Any, Dict, List, Optional

from database.connection import ForumDB
from database.errors import NotFound
from .utils import unix_now


async def save_revision(
    db: ForumDB,
    postid: int,
    textareaid: str,
    body: str,
    userid: int = 0,
    email: str = "",
    url: Optional[str] = None,
    created: Optional[int] = None,
) -> Dict[str, Any]:
    """
    편집 이력 저장. version 은 같은 (postid, textareaid) 의 최대값 + 1 을
    INSERT ... SELECT 한 문장 안에서 계산한다.
    """
    async with db.transaction():
        revisionid = await db.execute(
            f"""
            INSERT INTO `{db.t.post_revisions}` (`userid`, `textareaid`, `postid`, `body`,
                `created`, `version`, `email`, `url`)
            SELECT :userid, :textareaid, :postid, :body,
                :created, COALESCE(MAX(`version`), 0) + 1, :email, :url
            FROM `{db.t.post_revisions}`
            WHERE `postid` = :postid AND `textareaid` = :textareaid
            """,
            {
                "userid": userid, "textareaid": textareaid, "postid": postid, "body": body,
                "created": created or unix_now(), "email": email, "url": url,
            },
        )
        return await db.fetch_one(
            f"SELECT * FROM `{db.t.post_revisions}` WHERE `revisionid` = :id", {"id": revisionid}
        )


async def list_revisions(db: ForumDB, postid: int, textareaid: Optional[str] = None) -> List[Dict[str, Any]]:
    """최신 버전 먼저"""
    sql = f"SELECT * FROM `{db.t.post_revisions}` WHERE `postid` = :postid"
    params: Dict[str, Any] = {"postid": postid}
    if textareaid is not None:
        sql += " AND `textareaid` = :textareaid"
        params["textareaid"] = textareaid
    return await db.fetch_all(sql + " ORDER BY `version` DESC, `revisionid` DESC", params)


async def latest_revision(db: ForumDB, postid: int, textareaid: str) -> Dict[str, Any]:
    rows = await list_revisions(db, postid, textareaid)
    if not rows:
        raise NotFound(f"no revisions for post {postid} ({textareaid})")
    return rows[0]
