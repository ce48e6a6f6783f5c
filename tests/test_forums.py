import pytest

from database import Duplicate, InvalidOperation, NotFound
from models import (
    Status,
    create_forum,
    forum_tree,
    get_forum,
    get_forum_by_slug,
    list_forums,
    move_forum,
    set_forum_status,
)
from models.utils import clamp_page, slugify


async def test_create_and_lookup(db):
    forumid = await create_forum(db, "Python Help!", description="questions")
    forum = await get_forum(db, forumid)
    assert forum["slug"] == "python-help"
    assert forum["topics"] == forum["posts"] == 0
    assert (await get_forum_by_slug(db, "python-help"))["forumid"] == forumid

    with pytest.raises(NotFound):
        await get_forum(db, 9999)
    with pytest.raises(NotFound):
        await get_forum_by_slug(db, "missing")


async def test_slug_unique_within_191_prefix(db):
    """
    앞 191자가 같은 slug 는 UNIQUE 키에 걸린다.
    """
    await create_forum(db, "A", slug="a" * 191 + "x")
    with pytest.raises(Duplicate):
        await create_forum(db, "B", slug="a" * 191 + "y")
    # 191자 안에서 다르면 괜찮다
    await create_forum(db, "C", slug="a" * 190 + "b")


async def test_sqlite_slug_is_case_sensitive(db):
    await create_forum(db, "Upper", slug="News")
    await create_forum(db, "Lower", slug="news")


async def test_list_and_tree(db):
    cat = await create_forum(db, "Category", is_cat=True, order=1)
    second = await create_forum(db, "Second", parentid=cat, order=2)
    first = await create_forum(db, "First", parentid=cat, order=1)
    child = await create_forum(db, "Child", parentid=first)

    listed = await list_forums(db, parentid=cat)
    assert [f["forumid"] for f in listed] == [first, second]

    tree = await forum_tree(db)
    assert [f["forumid"] for f in tree] == [cat]
    assert [f["forumid"] for f in tree[0]["children"]] == [first, second]
    assert [f["forumid"] for f in tree[0]["children"][0]["children"]] == [child]


async def test_unknown_parent(db):
    with pytest.raises(NotFound):
        await create_forum(db, "Orphan", parentid=42)


async def test_move_forum_rejects_cycles(db):
    root = await create_forum(db, "Root")
    mid = await create_forum(db, "Mid", parentid=root)
    leaf = await create_forum(db, "Leaf", parentid=mid)

    with pytest.raises(InvalidOperation):
        await move_forum(db, root, leaf)
    with pytest.raises(InvalidOperation):
        await move_forum(db, mid, mid)

    await move_forum(db, leaf, 0, order=5)
    moved = await get_forum(db, leaf)
    assert moved["parentid"] == 0
    assert moved["order"] == 5


async def test_deleted_forum_is_tombstoned(db):
    forumid = await create_forum(db, "Old")
    await set_forum_status(db, forumid, Status.DELETED)
    assert (await get_forum(db, forumid))["status"] == Status.DELETED
    assert forumid not in [f["forumid"] for f in await list_forums(db)]
    assert forumid in [f["forumid"] for f in await list_forums(db, status=None)]


def test_slugify():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  --  ") == "untitled"
    assert slugify("파이썬 질문") == "파이썬-질문"
    assert len(slugify("x" * 500)) == 191


def test_clamp_page():
    assert clamp_page(0, -1) == (20, 0)
    assert clamp_page(500, 10) == (20, 10)
    assert clamp_page(5, 3) == (5, 3)
