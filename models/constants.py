# models/constants.py
from enum import Enum, IntEnum


class Status(IntEnum):
    """forums / topics / posts 의 status 컬럼. 카운터는 PUBLISHED 만 센다."""
    PUBLISHED = 0
    UNAPPROVED = 1
    DELETED = 2


class TopicType(IntEnum):
    REGULAR = 0
    STICKY = 1
    QUESTION = 2  # 답변(is_answer) 허용


class ProfileStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"
    TRASHED = "trashed"
    SPAMER = "spamer"


class ItemType(str, Enum):
    """subscribes.type / activity.itemtype 에 들어가는 다형 참조 종류"""
    FORUM = "forum"
    TOPIC = "topic"
    POST = "post"
    USER = "user"


SUBSCRIBABLE = (ItemType.FORUM, ItemType.TOPIC)


class ActivityType(str, Enum):
    NEW_REPLY = "new_reply"
    NEW_LIKE = "new_like"
    NEW_UP_VOTE = "new_up_vote"
    NEW_DOWN_VOTE = "new_down_vote"
    NEW_MENTION = "new_mention"
    EDIT_TOPIC = "edit_topic"
    EDIT_POST = "edit_post"


class Reaction(IntEnum):
    UP = 1
    DOWN = -1


class SearchMode(str, Enum):
    TITLE = "title"
    BODY = "body"
    TITLE_BODY = "title_body"


class Deletion(Enum):
    TOMBSTONE = "tombstone"  # status 변경, 데이터 보존
    REMOVE = "remove"        # 물리 삭제 (토글 off)


# 엔티티별 삭제 정책은 여기서만 정한다
DELETION = {
    "forums": Deletion.TOMBSTONE,
    "topics": Deletion.TOMBSTONE,
    "posts": Deletion.TOMBSTONE,
    "profiles": Deletion.TOMBSTONE,
    "likes": Deletion.REMOVE,
    "votes": Deletion.REMOVE,
    "views": Deletion.REMOVE,
    "subscribes": Deletion.REMOVE,
}

# 카테고리/기본값
DEFAULT_PACKAGE = "wpforo"
DEFAULT_MEMBER_TITLE = "member"
SLUG_MAX = 191
TAG_MAX = 190
