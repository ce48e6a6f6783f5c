# database/ddl_sqlite.py
"""
개발/테스트용 SQLite 스키마.

MySQL 스키마와 테이블/컬럼 이름은 동일하게 유지한다. 차이점:
- 인덱스 이름은 DB 전역이라 `<table>_<key>` 로 붙인다.
- 접두어 길이 UNIQUE 키 (`slug`(191) 등)는 substr() 표현식 인덱스로 만든다.
- FULLTEXT 키는 FTS5 외부 콘텐츠 테이블(`<table>_fts`) + 동기화 트리거로 만든다.
"""
from typing import List, Tuple

from .tables import TableNames

ZERO_DATE = "'0000-00-00 00:00:00'"


def fts_table(table: str) -> str:
    return f"{table}_fts"


def _index(table: str, name: str, cols: str, unique: bool = False) -> str:
    kind = "UNIQUE INDEX" if unique else "INDEX"
    return f"CREATE {kind} IF NOT EXISTS `{table}_{name}` ON `{table}` ({cols})"


def _fts(table: str, pk: str, columns: Tuple[str, ...]) -> List[str]:
    """외부 콘텐츠 FTS5 테이블과 INSERT/DELETE/UPDATE 동기화 트리거"""
    fts = fts_table(table)
    cols = ", ".join(columns)
    new_vals = ", ".join(f"new.`{c}`" for c in columns)
    old_vals = ", ".join(f"old.`{c}`" for c in columns)
    return [
        f"CREATE VIRTUAL TABLE IF NOT EXISTS `{fts}` USING fts5({cols}, content='{table}', content_rowid='{pk}')",
        f"""CREATE TRIGGER IF NOT EXISTS `{fts}_ai` AFTER INSERT ON `{table}` BEGIN
            INSERT INTO `{fts}`(rowid, {cols}) VALUES (new.`{pk}`, {new_vals});
        END""",
        f"""CREATE TRIGGER IF NOT EXISTS `{fts}_ad` AFTER DELETE ON `{table}` BEGIN
            INSERT INTO `{fts}`(`{fts}`, rowid, {cols}) VALUES ('delete', old.`{pk}`, {old_vals});
        END""",
        f"""CREATE TRIGGER IF NOT EXISTS `{fts}_au` AFTER UPDATE OF {cols} ON `{table}` BEGIN
            INSERT INTO `{fts}`(`{fts}`, rowid, {cols}) VALUES ('delete', old.`{pk}`, {old_vals});
            INSERT INTO `{fts}`(rowid, {cols}) VALUES (new.`{pk}`, {new_vals});
        END""",
    ]


def sqlite_statements(t: TableNames) -> List[Tuple[str, List[str]]]:
    f, tp, p = t.forums, t.topics, t.posts
    return [
        ("forums", [
            f"""CREATE TABLE IF NOT EXISTS `{f}` (
              `forumid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `title` TEXT NOT NULL,
              `slug` TEXT NOT NULL,
              `description` TEXT,
              `parentid` INTEGER NOT NULL DEFAULT 0,
              `icon` TEXT,
              `last_topicid` INTEGER NOT NULL DEFAULT 0,
              `last_postid` INTEGER NOT NULL DEFAULT 0,
              `last_userid` INTEGER NOT NULL DEFAULT 0,
              `last_post_date` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `topics` INTEGER NOT NULL DEFAULT 0,
              `posts` INTEGER NOT NULL DEFAULT 0,
              `permissions` TEXT,
              `meta_key` TEXT,
              `meta_desc` TEXT,
              `status` INTEGER NOT NULL DEFAULT 0,
              `is_cat` INTEGER NOT NULL DEFAULT 0,
              `cat_layout` INTEGER NOT NULL DEFAULT 0,
              `order` INTEGER NOT NULL DEFAULT 0,
              `color` TEXT NOT NULL DEFAULT ''
            )""",
            _index(f, "unique_slug", "substr(`slug`, 1, 191)", unique=True),
            _index(f, "order", "`order`"),
            _index(f, "status", "`status`"),
            _index(f, "parentid", "`parentid`"),
            _index(f, "last_postid", "`last_postid`"),
            _index(f, "is_cat", "`is_cat`"),
        ]),
        ("topics", [
            f"""CREATE TABLE IF NOT EXISTS `{tp}` (
              `topicid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `forumid` INTEGER NOT NULL,
              `first_postid` INTEGER NOT NULL DEFAULT 0,
              `userid` INTEGER NOT NULL,
              `title` TEXT NOT NULL,
              `slug` TEXT NOT NULL,
              `created` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `modified` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `last_post` INTEGER NOT NULL DEFAULT 0,
              `posts` INTEGER NOT NULL DEFAULT 0,
              `votes` INTEGER NOT NULL DEFAULT 0,
              `answers` INTEGER NOT NULL DEFAULT 0,
              `views` INTEGER NOT NULL DEFAULT 0,
              `meta_key` TEXT,
              `meta_desc` TEXT,
              `type` INTEGER NOT NULL DEFAULT 0,
              `solved` INTEGER NOT NULL DEFAULT 0,
              `closed` INTEGER NOT NULL DEFAULT 0,
              `has_attach` INTEGER NOT NULL DEFAULT 0,
              `private` INTEGER NOT NULL DEFAULT 0,
              `status` INTEGER NOT NULL DEFAULT 0,
              `name` TEXT NOT NULL DEFAULT '',
              `email` TEXT NOT NULL DEFAULT '',
              `prefix` TEXT NOT NULL DEFAULT '',
              `tags` TEXT
            )""",
            _index(tp, "slug", "substr(`slug`, 1, 191)"),
            _index(tp, "forumid", "`forumid`"),
            _index(tp, "first_postid", "`first_postid`"),
            _index(tp, "created", "`created`"),
            _index(tp, "modified", "`modified`"),
            _index(tp, "last_post", "`last_post`"),
            _index(tp, "type", "`type`"),
            _index(tp, "status", "`status`"),
            _index(tp, "email", "`email`"),
            _index(tp, "solved", "`solved`"),
            _index(tp, "is_private", "`private`"),
            _index(tp, "own_private", "`userid`, `private`"),
            _index(tp, "forumid_status", "`forumid`, `status`"),
            _index(tp, "forumid_status_private", "`forumid`, `status`, `private`"),
            _index(tp, "prefix", "`prefix`"),
            *_fts(tp, "topicid", ("title",)),
        ]),
        ("posts", [
            f"""CREATE TABLE IF NOT EXISTS `{p}` (
              `postid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `parentid` INTEGER NOT NULL DEFAULT 0,
              `forumid` INTEGER NOT NULL,
              `topicid` INTEGER NOT NULL,
              `userid` INTEGER NOT NULL,
              `title` TEXT,
              `body` TEXT,
              `created` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `modified` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `likes` INTEGER NOT NULL DEFAULT 0,
              `votes` INTEGER NOT NULL DEFAULT 0,
              `is_answer` INTEGER NOT NULL DEFAULT 0,
              `is_first_post` INTEGER NOT NULL DEFAULT 0,
              `status` INTEGER NOT NULL DEFAULT 0,
              `name` TEXT NOT NULL DEFAULT '',
              `email` TEXT NOT NULL DEFAULT '',
              `private` INTEGER NOT NULL DEFAULT 0,
              `root` INTEGER NULL DEFAULT NULL
            )""",
            _index(p, "topicid", "`topicid`"),
            _index(p, "forumid", "`forumid`"),
            _index(p, "userid", "`userid`"),
            _index(p, "created", "`created`"),
            _index(p, "parentid", "`parentid`"),
            _index(p, "is_answer", "`is_answer`"),
            _index(p, "is_first_post", "`is_first_post`"),
            _index(p, "status", "`status`"),
            _index(p, "email", "`email`"),
            _index(p, "is_private", "`private`"),
            _index(p, "root", "`root`"),
            _index(p, "forumid_status", "`forumid`, `status`"),
            _index(p, "topicid_status", "`topicid`, `status`"),
            _index(p, "topicid_solved", "`topicid`, `is_answer`"),
            _index(p, "topicid_parentid", "`topicid`, `parentid`"),
            _index(p, "forumid_status_private", "`forumid`, `status`, `private`"),
            _index(p, "forumid_answer_first", "`forumid`, `is_answer`, `is_first_post`"),
            *_fts(p, "postid", ("title", "body")),
        ]),
        ("profiles", [
            f"""CREATE TABLE IF NOT EXISTS `{t.profiles}` (
              `userid` INTEGER NOT NULL PRIMARY KEY,
              `title` TEXT NOT NULL DEFAULT 'member',
              `username` TEXT NOT NULL,
              `groupid` INTEGER NOT NULL,
              `posts` INTEGER NOT NULL DEFAULT 0,
              `questions` INTEGER NOT NULL DEFAULT 0,
              `answers` INTEGER NOT NULL DEFAULT 0,
              `comments` INTEGER NOT NULL DEFAULT 0,
              `site` TEXT,
              `icq` TEXT,
              `aim` TEXT,
              `yahoo` TEXT,
              `msn` TEXT,
              `facebook` TEXT,
              `twitter` TEXT,
              `gtalk` TEXT,
              `skype` TEXT,
              `avatar` TEXT,
              `signature` TEXT,
              `about` TEXT,
              `occupation` TEXT,
              `location` TEXT,
              `last_login` TEXT NOT NULL DEFAULT {ZERO_DATE},
              `online_time` INTEGER,
              `rank` INTEGER NOT NULL DEFAULT 0,
              `like` INTEGER NOT NULL DEFAULT 0,
              `status` TEXT DEFAULT 'active' CHECK (`status` IN ('active', 'blocked', 'trashed', 'spamer')),
              `timezone` TEXT,
              `is_email_confirmed` INTEGER NOT NULL DEFAULT 0,
              `secondary_groups` TEXT,
              `fields` TEXT
            )""",
            _index(t.profiles, "groupid", "`groupid`"),
            _index(t.profiles, "online_time", "`online_time`"),
            _index(t.profiles, "posts", "`posts`"),
            _index(t.profiles, "status", "`status`"),
            _index(t.profiles, "is_email_confirmed", "`is_email_confirmed`"),
        ]),
        ("usergroups", [
            f"""CREATE TABLE IF NOT EXISTS `{t.usergroups}` (
              `groupid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `name` TEXT NOT NULL,
              `cans` TEXT NOT NULL,
              `description` TEXT,
              `utitle` TEXT NOT NULL DEFAULT '',
              `role` TEXT NOT NULL DEFAULT '',
              `access` TEXT NOT NULL DEFAULT '',
              `color` TEXT NOT NULL DEFAULT '',
              `visible` INTEGER NOT NULL DEFAULT 1,
              `secondary` INTEGER NOT NULL DEFAULT 1
            )""",
            _index(t.usergroups, "visible", "`visible`"),
            _index(t.usergroups, "secondary", "`secondary`"),
            _index(t.usergroups, "unique_group_name", "substr(`name`, 1, 191)", unique=True),
        ]),
        ("languages", [
            f"""CREATE TABLE IF NOT EXISTS `{t.languages}` (
              `langid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `name` TEXT NOT NULL
            )""",
            _index(t.languages, "unique_language_name", "substr(`name`, 1, 191)", unique=True),
        ]),
        ("phrases", [
            f"""CREATE TABLE IF NOT EXISTS `{t.phrases}` (
              `phraseid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `langid` INTEGER NOT NULL,
              `phrase_key` TEXT NOT NULL,
              `phrase_value` TEXT NOT NULL,
              `package` TEXT NOT NULL DEFAULT 'wpforo'
            )""",
            _index(t.phrases, "langid", "`langid`"),
            _index(t.phrases, "phrase_key", "substr(`phrase_key`, 1, 191)"),
            _index(t.phrases, "lng_and_key_uniq", "`langid`, substr(`phrase_key`, 1, 191)", unique=True),
        ]),
        ("likes", [
            f"""CREATE TABLE IF NOT EXISTS `{t.likes}` (
              `likeid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `userid` INTEGER NOT NULL,
              `postid` INTEGER NOT NULL,
              `post_userid` INTEGER NOT NULL
            )""",
            _index(t.likes, "userid", "`userid`, `postid`", unique=True),
            _index(t.likes, "post_userid", "`post_userid`"),
        ]),
        ("views", [
            f"""CREATE TABLE IF NOT EXISTS `{t.views}` (
              `vid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `userid` INTEGER NOT NULL,
              `topicid` INTEGER NOT NULL,
              `created` INTEGER NOT NULL
            )""",
            _index(t.views, "userid", "`userid`"),
            _index(t.views, "topicid", "`topicid`"),
            _index(t.views, "user_topic", "`userid`, `topicid`", unique=True),
        ]),
        ("votes", [
            f"""CREATE TABLE IF NOT EXISTS `{t.votes}` (
              `voteid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `userid` INTEGER NOT NULL,
              `postid` INTEGER NOT NULL,
              `reaction` INTEGER NOT NULL DEFAULT 1,
              `post_userid` INTEGER NOT NULL
            )""",
            _index(t.votes, "userid", "`userid`, `postid`", unique=True),
        ]),
        ("accesses", [
            f"""CREATE TABLE IF NOT EXISTS `{t.accesses}` (
              `accessid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `access` TEXT NOT NULL,
              `title` TEXT NOT NULL,
              `cans` TEXT NOT NULL
            )""",
            _index(t.accesses, "access", "substr(`access`, 1, 191)", unique=True),
        ]),
        ("subscribes", [
            f"""CREATE TABLE IF NOT EXISTS `{t.subscribes}` (
              `subid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `itemid` INTEGER NOT NULL,
              `type` TEXT NOT NULL,
              `confirmkey` TEXT NOT NULL,
              `userid` INTEGER NOT NULL,
              `active` INTEGER NOT NULL DEFAULT 0,
              `user_name` TEXT NOT NULL,
              `user_email` TEXT NOT NULL
            )""",
            _index(t.subscribes, "fld_group_unq", "`itemid`, `type`, `userid`, `user_email`", unique=True),
            _index(t.subscribes, "confirmkey", "`confirmkey`", unique=True),
            _index(t.subscribes, "itemid_2", "`itemid`"),
            _index(t.subscribes, "userid", "`userid`"),
        ]),
        ("visits", [
            f"""CREATE TABLE IF NOT EXISTS `{t.visits}` (
              `id` INTEGER PRIMARY KEY AUTOINCREMENT,
              `userid` INTEGER NOT NULL,
              `name` TEXT NOT NULL,
              `ip` TEXT NOT NULL,
              `time` INTEGER NOT NULL,
              `forumid` INTEGER NOT NULL,
              `topicid` INTEGER NOT NULL
            )""",
            _index(t.visits, "userid", "`userid`"),
            _index(t.visits, "forumid", "`forumid`"),
            _index(t.visits, "topicid", "`topicid`"),
            _index(t.visits, "time", "`time`"),
            _index(t.visits, "ip", "`ip`"),
            _index(t.visits, "time_forumid", "`time`, `forumid`"),
            _index(t.visits, "time_topicid", "`time`, `topicid`"),
            _index(t.visits, "unique_tracking", "`userid`, `ip`, `forumid`, `topicid`", unique=True),
        ]),
        ("activity", [
            f"""CREATE TABLE IF NOT EXISTS `{t.activity}` (
              `id` INTEGER PRIMARY KEY AUTOINCREMENT,
              `type` TEXT NOT NULL,
              `itemid` INTEGER NOT NULL,
              `itemtype` TEXT NOT NULL,
              `itemid_second` INTEGER NOT NULL DEFAULT 0,
              `userid` INTEGER NOT NULL DEFAULT 0,
              `name` TEXT NOT NULL DEFAULT '',
              `email` TEXT NOT NULL DEFAULT '',
              `date` INTEGER NOT NULL DEFAULT 0,
              `content` TEXT,
              `permalink` TEXT NOT NULL DEFAULT '',
              `new` INTEGER NOT NULL DEFAULT 0
            )""",
            _index(t.activity, "type", "`type`"),
            _index(t.activity, "type_objid_objtype", "`type`, `itemid`, `itemtype`"),
            _index(t.activity, "type_objid_objtype_userid", "`type`, `itemid`, `itemtype`, `userid`"),
            _index(t.activity, "itemtype_userid_new", "`itemtype`, `userid`, `new`"),
            _index(t.activity, "date", "`date`"),
        ]),
        ("post_revisions", [
            f"""CREATE TABLE IF NOT EXISTS `{t.post_revisions}` (
              `revisionid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `userid` INTEGER NOT NULL DEFAULT 0,
              `textareaid` TEXT NOT NULL,
              `postid` INTEGER NOT NULL DEFAULT 0,
              `body` TEXT,
              `created` INTEGER NOT NULL DEFAULT 0,
              `version` INTEGER NOT NULL DEFAULT 0,
              `email` TEXT NOT NULL DEFAULT '',
              `url` TEXT
            )""",
            _index(t.post_revisions, "userid_textareaid_postid_email",
                   "`userid`, `textareaid`, `postid`, `email`, substr(`url`, 1, 70)"),
        ]),
        ("tags", [
            f"""CREATE TABLE IF NOT EXISTS `{t.tags}` (
              `tagid` INTEGER PRIMARY KEY AUTOINCREMENT,
              `tag` TEXT NOT NULL,
              `prefix` INTEGER NOT NULL DEFAULT 0,
              `count` INTEGER NOT NULL DEFAULT 0
            )""",
            _index(t.tags, "tag", "substr(`tag`, 1, 190)", unique=True),
            _index(t.tags, "prefix", "`prefix`"),
        ]),
    ]
