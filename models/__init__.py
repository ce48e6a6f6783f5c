from .constants import (
    ActivityType,
    Deletion,
    ItemType,
    ProfileStatus,
    Reaction,
    SearchMode,
    Status,
    TopicType,
)
from .counters import atomic_add, counter_drift, reconcile_counters
from .lifecycle import remove, tombstone
from .tags import get_tag, normalize_tags, popular_tags, reconcile_tag_counts, release_tag, use_tag
from .forums import (
    create_forum,
    forum_tree,
    get_forum,
    get_forum_by_slug,
    list_forums,
    move_forum,
    set_forum_status,
)
from .topics import (
    close_topic,
    create_topic,
    get_first_post,
    get_topic,
    list_topics,
    move_topic,
    set_topic_status,
    set_topic_tags,
)
from .posts import (
    add_reply,
    edit_post,
    get_post,
    list_answers,
    list_posts,
    list_replies,
    mark_answer,
    set_post_status,
)
from .reactions import cast_vote, get_vote, has_liked, has_viewed, record_view, toggle_like, unview
from .profiles import (
    create_access,
    create_profile,
    create_usergroup,
    get_access,
    get_profile,
    get_usergroup,
    set_profile_group,
    set_profile_status,
    update_profile,
)
from .subscriptions import confirm_subscription, list_subscribers, subscribe, unsubscribe
from .visits import online_visitors, prune_visits, track_visit
from .activity import add_activity, list_activity, mark_activity_read, unread_activity
from .revisions import latest_revision, list_revisions, save_revision
from .phrases import add_language, get_language_by_name, get_phrases, set_phrase
from .search import search_posts, search_topics
from .integrity import check_integrity, check_topic
