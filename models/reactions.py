# models/reactions.py
"""
좋아요 / 투표 / 조회 토글.

트랜잭션의 첫 문장은 항상 UNIQUE 키로 보호된 INSERT 다.
- 성공 → "없던 상태"였으므로 켬
- UNIQUE 위반 → "이미 켜진 상태"이므로 삭제(또는 투표 방향 전환)
같은 사용자의 동시 토글 두 개는 엔진의 행 잠금 덕분에 하나의 일관된 상태로 수렴한다.
"""
from typing import Any, Dict, Optional

from database.connection import ForumDB
from database.errors import INTEGRITY_ERRORS, InvalidOperation
from logger import logger
from .constants import Reaction
from .counters import atomic_add
from .lifecycle import remove
from .posts import get_post
from .topics import get_topic
from .utils import unix_now


async def toggle_like(db: ForumDB, postid: int, userid: int) -> bool:
    """좋아요 토글. 반환값: 토글 후 좋아요 상태."""
    post = await get_post(db, postid)

    async with db.transaction():
        try:
            await db.execute(
                f"INSERT INTO `{db.t.likes}` (`userid`, `postid`, `post_userid`) VALUES (:userid, :postid, :post_userid)",
                {"userid": userid, "postid": postid, "post_userid": post["userid"]},
            )
            liked = True
        except INTEGRITY_ERRORS:
            await remove(db, "likes", userid=userid, postid=postid)
            liked = False

        delta = 1 if liked else -1
        await atomic_add(db, "posts", "likes", "postid", postid, delta)
        await atomic_add(db, "profiles", "like", "userid", post["userid"], delta)

    logger.debug("like toggled: post=%s user=%s liked=%s", postid, userid, liked)
    return liked


async def has_liked(db: ForumDB, postid: int, userid: int) -> bool:
    row = await db.fetch_one(
        f"SELECT `likeid` FROM `{db.t.likes}` WHERE `userid` = :userid AND `postid` = :postid",
        {"userid": userid, "postid": postid},
    )
    return row is not None


async def _insert_vote(db: ForumDB, post: Dict[str, Any], userid: int, reaction: Reaction) -> None:
    await db.execute(
        f"""
        INSERT INTO `{db.t.votes}` (`userid`, `postid`, `reaction`, `post_userid`)
        VALUES (:userid, :postid, :reaction, :post_userid)
        """,
        {"userid": userid, "postid": post["postid"], "reaction": int(reaction), "post_userid": post["userid"]},
    )


async def cast_vote(db: ForumDB, postid: int, userid: int, reaction: int = Reaction.UP) -> Optional[int]:
    """
    투표. 없으면 추가, 같은 방향이면 취소, 반대 방향이면 전환.
    posts.votes / topics.votes 는 reaction 의 변화량만큼 움직인다 (전환이면 ±2).
    반환값: 투표 후 reaction (취소면 None).
    """
    try:
        reaction = Reaction(int(reaction))
    except ValueError:
        raise InvalidOperation(f"invalid reaction: {reaction}")
    post = await get_post(db, postid)

    async with db.transaction():
        try:
            await _insert_vote(db, post, userid, reaction)
            delta, current = int(reaction), int(reaction)
        except INTEGRITY_ERRORS:
            previous = await db.fetch_val(
                f"SELECT `reaction` FROM `{db.t.votes}` WHERE `userid` = :userid AND `postid` = :postid"
                + (" FOR UPDATE" if db.is_mysql else ""),
                {"userid": userid, "postid": postid},
            )
            if previous is None:
                # INSERT 실패 직후 다른 세션이 취소함 → 새 투표로 처리
                await _insert_vote(db, post, userid, reaction)
                delta, current = int(reaction), int(reaction)
            elif previous == reaction:
                await remove(db, "votes", userid=userid, postid=postid)
                delta, current = -int(reaction), None
            else:
                await db.execute(
                    f"UPDATE `{db.t.votes}` SET `reaction` = :reaction WHERE `userid` = :userid AND `postid` = :postid",
                    {"reaction": int(reaction), "userid": userid, "postid": postid},
                )
                delta, current = int(reaction) - int(previous), int(reaction)

        # votes 컬럼은 부호 있는 합계 → 0 에서 멈추지 않는다
        await atomic_add(db, "posts", "votes", "postid", postid, delta, floor=False)
        await atomic_add(db, "topics", "votes", "topicid", post["topicid"], delta, floor=False)

    logger.debug("vote cast: post=%s user=%s reaction=%s delta=%s", postid, userid, current, delta)
    return current


async def get_vote(db: ForumDB, postid: int, userid: int) -> Optional[int]:
    return await db.fetch_val(
        f"SELECT `reaction` FROM `{db.t.votes}` WHERE `userid` = :userid AND `postid` = :postid",
        {"userid": userid, "postid": postid},
    )


async def record_view(db: ForumDB, topicid: int, userid: int = 0) -> bool:
    """
    조회수 +1. 로그인 사용자면 (userid, topicid) 조회 기록을 남긴다.
    반환값: 이 사용자의 첫 조회인지 여부 (손님은 항상 False).
    """
    await get_topic(db, topicid)

    async with db.transaction():
        await atomic_add(db, "topics", "views", "topicid", topicid, +1)
        if not userid:
            return False
        try:
            await db.execute(
                f"INSERT INTO `{db.t.views}` (`userid`, `topicid`, `created`) VALUES (:userid, :topicid, :created)",
                {"userid": userid, "topicid": topicid, "created": unix_now()},
            )
            return True
        except INTEGRITY_ERRORS:
            await db.execute(
                f"UPDATE `{db.t.views}` SET `created` = :created WHERE `userid` = :userid AND `topicid` = :topicid",
                {"userid": userid, "topicid": topicid, "created": unix_now()},
            )
            return False


async def unview(db: ForumDB, topicid: int, userid: int) -> None:
    """조회 기록 삭제 ("안 읽음" 표시). topics.views 는 누적 조회수라 줄이지 않는다."""
    await remove(db, "views", userid=userid, topicid=topicid)


async def has_viewed(db: ForumDB, topicid: int, userid: int) -> bool:
    row = await db.fetch_one(
        f"SELECT `vid` FROM `{db.t.views}` WHERE `userid` = :userid AND `topicid` = :topicid",
        {"userid": userid, "topicid": topicid},
    )
    return row is not None
